"""Supabase Auth gateway."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from studio_portal.domain.models import Principal
from studio_portal.services.auth import AuthGateway

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Validates access tokens against Supabase Auth."""

    client: Client

    def resolve_principal(self, access_token: str) -> Principal | None:
        """Return the user behind an access token, or None if it is invalid."""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception:
            _logger.warning("Rejected access token", exc_info=True)
            return None
        user = getattr(response, "user", None) if response else None
        if user is None:
            return None
        metadata = getattr(user, "user_metadata", None) or {}
        full_name = metadata.get("full_name") or metadata.get("name")
        return Principal(
            user_id=UUID(str(user.id)),
            email=getattr(user, "email", None),
            full_name=full_name,
        )
