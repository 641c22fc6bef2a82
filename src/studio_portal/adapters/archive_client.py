"""Zip archive builder for final photo downloads."""

import io
import zipfile
from dataclasses import dataclass

import httpx

from studio_portal.services.delivery import ArchiveBuilder, filename_from_url


@dataclass
class HttpxArchiveBuilder(ArchiveBuilder):
    """Downloads files with httpx and packs them into a zip archive."""

    http_client: httpx.AsyncClient
    timeout: float = 20.0

    @classmethod
    def create(cls, timeout: float = 20.0) -> "HttpxArchiveBuilder":
        """Create an archive builder with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True), timeout=timeout
        )

    async def build(self, urls: list[str]) -> bytes:
        """Download each URL in order and return the zip bytes."""
        buffer = io.BytesIO()
        used: set[str] = set()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for index, url in enumerate(urls):
                response = await self.http_client.get(url, timeout=self.timeout)
                response.raise_for_status()
                name = _unique_name(filename_from_url(url, index), used)
                used.add(name)
                archive.writestr(name, response.content)
        return buffer.getvalue()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _unique_name(name: str, used: set[str]) -> str:
    """Prefix a counter until the archive entry name is unused."""
    candidate = name
    counter = 2
    while candidate in used:
        candidate = f"{counter}-{name}"
        counter += 1
    return candidate
