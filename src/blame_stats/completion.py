"""
Shell completion scripts generated from the argparse parser, so flags and
their choices never drift from what `blame-stats` accepts.
"""

from __future__ import annotations

import argparse

SHELLS = ("bash", "zsh", "fish")

# Options whose value is a path rather than a fixed choice.
_FILE_OPTIONS = ("--config",)


def _options(parser: argparse.ArgumentParser) -> list[argparse.Action]:
    return [a for a in parser._actions if a.option_strings]


def _takes_value(action: argparse.Action) -> bool:
    return action.nargs != 0


def bash_script(parser: argparse.ArgumentParser, prog: str) -> str:
    func = "_" + prog.replace("-", "_")
    words = " ".join(s for a in _options(parser) for s in a.option_strings)
    cases: list[str] = []
    for a in _options(parser):
        if not _takes_value(a):
            continue
        pattern = "|".join(a.option_strings)
        if a.choices:
            choices = " ".join(str(c) for c in a.choices)
            cases.append(f'        {pattern}) COMPREPLY=( $(compgen -W "{choices}" -- "$cur") ); return 0 ;;')
        elif any(s in _FILE_OPTIONS for s in a.option_strings):
            cases.append(f'        {pattern}) COMPREPLY=( $(compgen -f -- "$cur") ); return 0 ;;')
        else:
            cases.append(f"        {pattern}) return 0 ;;")
    return "\n".join(
        [
            f"{func}() {{",
            "    local cur prev",
            '    cur="${COMP_WORDS[COMP_CWORD]}"',
            '    prev="${COMP_WORDS[COMP_CWORD-1]}"',
            '    case "$prev" in',
            *cases,
            "    esac",
            '    if [[ "$cur" == -* ]]; then',
            f'        COMPREPLY=( $(compgen -W "{words}" -- "$cur") )',
            "    else",
            '        COMPREPLY=( $(compgen -d -- "$cur") )',
            "    fi",
            "}",
            f"complete -F {func} {prog}",
        ]
    ) + "\n"


def zsh_script(parser: argparse.ArgumentParser, prog: str) -> str:
    return "autoload -U +X bashcompinit && bashcompinit\n" + bash_script(parser, prog)


def _fish_quote(s: str) -> str:
    return "'" + s.replace("\\", "\\\\").replace("'", "\\'") + "'"


def fish_script(parser: argparse.ArgumentParser, prog: str) -> str:
    lines = [f"complete -c {prog} -f -a '(__fish_complete_directories)'"]
    for a in _options(parser):
        parts = [f"complete -c {prog}"]
        for s in a.option_strings:
            if s.startswith("--"):
                parts.append(f"-l {s[2:]}")
            else:
                parts.append(f"-s {s[1:]}")
        if _takes_value(a):
            if a.choices:
                parts.append("-x -a " + _fish_quote(" ".join(str(c) for c in a.choices)))
            elif any(s in _FILE_OPTIONS for s in a.option_strings):
                parts.append("-r -F")
            else:
                parts.append("-x")
        if a.help and a.help is not argparse.SUPPRESS:
            parts.append("-d " + _fish_quote(a.help.replace("%(prog)s", prog).replace("%%", "%")))
        lines.append(" ".join(parts))
    return "\n".join(lines) + "\n"


def completion_script(parser: argparse.ArgumentParser, shell: str) -> str:
    prog = parser.prog
    if shell == "bash":
        return bash_script(parser, prog)
    if shell == "zsh":
        return zsh_script(parser, prog)
    if shell == "fish":
        return fish_script(parser, prog)
    raise ValueError(f"unsupported shell {shell!r}; expected one of {', '.join(SHELLS)}")
