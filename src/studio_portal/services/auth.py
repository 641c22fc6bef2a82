"""Authentication interface."""

from typing import Protocol

from studio_portal.domain.models import Principal


class AuthGateway(Protocol):
    """Resolves access tokens issued by the hosted auth service."""

    def resolve_principal(self, access_token: str) -> Principal | None:
        """Return the principal for a valid token, or None."""
