"""Domain models for the studio portal."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Principal:
    """Authenticated user making a request."""

    user_id: UUID
    email: str | None = None
    full_name: str | None = None

    @property
    def first_name(self) -> str:
        """Return a friendly first name for greetings."""
        name = self.full_name or (self.email.split("@")[0] if self.email else None)
        if not name:
            return "there"
        return name.split(" ")[0]
