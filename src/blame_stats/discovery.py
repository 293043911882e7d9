from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path

LOG = logging.getLogger(__name__)

SKIP_DIRNAMES = frozenset(
    {
        ".git",
        "node_modules",
        "vendor",
        ".cache",
        "__pycache__",
        ".vscode",
        ".idea",
        ".vs",
        "dist",
        "build",
        ".next",
        ".nuxt",
    }
)

DEFAULT_EXCLUDE_GLOBS = (
    # Lock files
    "*-lock.*", "*.lock", "Cargo.lock", "yarn.lock", "package-lock.json", "poetry.lock",
    # Images
    "*.gif", "*.png", "*.jpg", "*.jpeg", "*.webp", "*.ico", "*.tiff", "*.tif", "*.bmp", "*.svg",
    # Fonts
    "*.woff", "*.woff2", "*.ttf", "*.otf", "*.eot",
    # Media
    "*.mp4", "*.avi", "*.mov", "*.wmv", "*.flv", "*.webm", "*.mp3", "*.wav", "*.flac", "*.aac", "*.ogg",
    # Archives
    "*.zip", "*.tar", "*.tgz", "*.rar", "*.7z", "*.gz", "*.bz2", "*.xz",
    # Binaries
    "*.exe", "*.dll", "*.so", "*.dylib", "*.bin", "*.deb", "*.rpm", "*.dmg", "*.pkg", "*.msi",
    # Databases
    "*.db", "*.sqlite", "*.sqlite3", "*.mdb",
    # Documents
    "*.pdf", "*.doc", "*.docx", "*.xls", "*.xlsx", "*.ppt", "*.pptx",
    # Compiled
    "*.o", "*.obj", "*.class", "*.pyc", "*.pyo", "*.pyd", "*.a", "*.lib", "*.jar", "*.war", "*.ear",
    # Minified
    "*.min.js", "*.min.css", "*.min.html",
    # OS files
    ".DS_Store", "Thumbs.db", "desktop.ini", ".directory",
    # Editors
    "*.swp", "*.swo", "*~", "*.tmp",
    # Logs
    "*.log", "*.logs",
    # Certificates
    "*.pem", "*.key", "*.p12", "*.pfx", "*.crt", "*.cer",
    # Backups
    "*.bak", "*.backup", "*.orig",
)


def load_gitignore_patterns(root: Path) -> list[str]:
    """
    Read the plain patterns of `root/.gitignore`. Comments, blank lines and
    negations are skipped and a trailing "/" is dropped; nested .gitignore
    files are not consulted.
    """
    path = root / ".gitignore"
    if not path.is_file():
        return []
    patterns: list[str] = []
    for raw in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or line.startswith("!"):
            continue
        line = line.rstrip("/")
        if line:
            patterns.append(line)
    return patterns


def _glob_match(rel_path: str, name: str, patterns: list[str] | tuple[str, ...]) -> bool:
    for pat in patterns:
        if fnmatch.fnmatchcase(name, pat) or fnmatch.fnmatchcase(rel_path, pat):
            return True
    return False


def should_exclude_file(
    rel_path: str,
    *,
    extra_patterns: list[str] | tuple[str, ...] = (),
    gitignore_patterns: list[str] | tuple[str, ...] = (),
) -> bool:
    p = rel_path.replace("\\", "/")
    name = p.rsplit("/", 1)[-1]
    if _glob_match(p, name, DEFAULT_EXCLUDE_GLOBS):
        return True
    if _glob_match(p, name, extra_patterns):
        return True
    for pat in gitignore_patterns:
        pat = pat.lstrip("/")
        if not pat:
            continue
        if fnmatch.fnmatchcase(name, pat) or fnmatch.fnmatchcase(p, pat) or pat in p:
            return True
    return False


def discover_files(root: Path, extra_patterns: list[str] | tuple[str, ...] = ()) -> list[str]:
    """Return sorted root-relative POSIX paths of the files worth blaming under `root`."""
    gitignore_patterns = load_gitignore_patterns(root)
    if gitignore_patterns:
        LOG.info("Loaded %d patterns from .gitignore", len(gitignore_patterns))

    def onerror(err: OSError) -> None:
        LOG.debug("skipping unreadable directory: %s", err)

    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRNAMES)
        rel_dir = Path(dirpath).relative_to(root)
        for fname in filenames:
            if fname == ".git":
                continue
            full = Path(dirpath) / fname
            if not full.is_file():
                continue
            rel = (rel_dir / fname).as_posix()
            if should_exclude_file(rel, extra_patterns=extra_patterns, gitignore_patterns=gitignore_patterns):
                continue
            files.append(rel)
    files.sort()
    return files
