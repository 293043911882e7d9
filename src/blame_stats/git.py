from __future__ import annotations

from pathlib import Path

from .errors import RepositoryError

BLAME_FLAGS = ("-M", "-C", "-w", "--line-porcelain")


def validate_repository(root: Path) -> Path:
    """
    Resolve `root` and make sure it is an existing directory holding a `.git`
    entry (directory for normal clones, file for worktrees and submodules).
    """
    try:
        resolved = root.expanduser().resolve()
    except OSError as e:
        raise RepositoryError(f"invalid directory path {str(root)!r}: {e}") from e
    if not resolved.exists():
        raise RepositoryError(f"directory {str(resolved)!r} does not exist")
    if not resolved.is_dir():
        raise RepositoryError(f"{str(resolved)!r} is not a directory")
    if not (resolved / ".git").exists():
        raise RepositoryError(f"{str(resolved)!r} is not a git repository")
    return resolved


def blame_args(path: str, *, since: str = "", until: str = "") -> list[str]:
    args = ["blame", *BLAME_FLAGS]
    if since:
        args.append(f"--since={since}")
    if until:
        args.append(f"--until={until}")
    args.extend(["--", path])
    return args
