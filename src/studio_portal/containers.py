"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from studio_portal.adapters.archive_client import HttpxArchiveBuilder
from studio_portal.adapters.supabase_auth_gateway import SupabaseAuthGateway
from studio_portal.adapters.supabase_project_repository import (
    SupabaseProjectRepository,
)
from studio_portal.config import Settings
from studio_portal.services.admin import AdminService
from studio_portal.services.auth import AuthGateway
from studio_portal.services.delivery import DeliveryGate
from studio_portal.services.projects import ProjectService
from studio_portal.services.reviews import ReviewService
from studio_portal.services.selection import SelectionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_gateway: AuthGateway
    project_service: ProjectService
    selection_service: SelectionService
    review_service: ReviewService
    delivery_gate: DeliveryGate
    admin_service: AdminService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    project_repository = SupabaseProjectRepository(supabase_client)
    archive_builder = HttpxArchiveBuilder.create(
        timeout=resolved_settings.archive_download_timeout
    )
    delivery_gate = DeliveryGate(
        repository=project_repository,
        archive_builder=archive_builder,
        fallback_archive_name=resolved_settings.archive_fallback_name,
    )

    async def close_resources() -> None:
        await archive_builder.close()

    return AppContainer(
        settings=resolved_settings,
        auth_gateway=SupabaseAuthGateway(supabase_client),
        project_service=ProjectService(project_repository),
        selection_service=SelectionService(project_repository),
        review_service=ReviewService(project_repository),
        delivery_gate=delivery_gate,
        admin_service=AdminService(project_repository),
        close_resources=close_resources,
    )
