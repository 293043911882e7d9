from __future__ import annotations

import dataclasses


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def format_identity(name: str, email: str, author_format: str) -> str:
    """
    Render one blame author as the identity that gets counted:
      - "name":       Jane Doe
      - "email":      jane@example.com
      - "name-email": Jane Doe <jane@example.com>
    Returns "" when the requested parts are missing.
    """
    name = name.strip()
    mail = email.strip().strip("<>").strip()
    if author_format == "email":
        return mail
    if author_format == "name-email":
        if not name:
            return ""
        return f"{name} <{mail}>" if mail else name
    return name


@dataclasses.dataclass(frozen=True)
class AuthorFilter:
    include: frozenset[str] = frozenset()
    exclude: frozenset[str] = frozenset()

    @classmethod
    def from_lists(cls, include: list[str] | tuple[str, ...], exclude: list[str] | tuple[str, ...]) -> "AuthorFilter":
        return cls(
            include=frozenset(normalize_name(a) for a in include if a.strip()),
            exclude=frozenset(normalize_name(a) for a in exclude if a.strip()),
        )

    @property
    def active(self) -> bool:
        return bool(self.include or self.exclude)

    def allows(self, *candidates: str) -> bool:
        """
        Decide whether an author is counted. `candidates` are the spellings an
        author can be named by (identity, bare name, email); a match on any of
        them counts.
        """
        keys = {normalize_name(c) for c in candidates if c and c.strip()}
        if keys & self.exclude:
            return False
        if self.include:
            return bool(keys & self.include)
        return True
