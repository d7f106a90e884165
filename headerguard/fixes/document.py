"""Ordered header document used to merge fixes into existing configuration."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from headerguard.fixes.models import SecurityFix


@dataclass
class HeaderEntry:
    key: str
    value: str


@dataclass
class HeaderDocument:
    """
    An ordered list of header key/value entries.

    Keys compare case-insensitively; the first spelling seen is kept.
    """

    entries: list[HeaderEntry] = field(default_factory=list)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "HeaderDocument":
        document = cls()
        for key, value in pairs:
            document.set(key, value)
        return document

    @classmethod
    def from_fixes(cls, fixes: Iterable[SecurityFix]) -> "HeaderDocument":
        return cls.from_pairs((fix.header, fix.value) for fix in fixes)

    def set(self, key: str, value: str) -> None:
        """Update the entry for ``key`` in place, or append a new one."""
        entry = self._find(key)
        if entry is None:
            self.entries.append(HeaderEntry(key=key, value=value))
        else:
            entry.value = value

    def pop(self, key: str) -> HeaderEntry | None:
        """Remove and return the entry for ``key``, if any."""
        entry = self._find(key)
        if entry is not None:
            self.entries.remove(entry)
        return entry

    def pairs(self) -> list[tuple[str, str]]:
        return [(entry.key, entry.value) for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def _find(self, key: str) -> HeaderEntry | None:
        lowered = key.lower()
        for entry in self.entries:
            if entry.key.lower() == lowered:
                return entry
        return None
