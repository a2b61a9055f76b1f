from __future__ import annotations

from dataclasses import asdict, dataclass

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass
class Notice:
    """Transient user-facing message (a toast in the browser)."""

    title: str
    description: str = ""
    variant: str = DEFAULT

    @classmethod
    def error(cls, description: str, title: str = "Error") -> "Notice":
        return cls(title=title, description=description, variant=DESTRUCTIVE)

    @classmethod
    def warning(cls, description: str) -> "Notice":
        return cls(title="Warning", description=description, variant=DESTRUCTIVE)

    def to_api(self) -> dict:
        return asdict(self)
