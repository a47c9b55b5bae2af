# upload pipeline
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from google.oauth2.credentials import Credentials

from gpup.collector import find_files
from gpup.config import Settings
from gpup.exceptions import NoFilesFoundError
from gpup.google_photos import (
    MediaItemResult,
    batch_create_media_items,
    create_album,
    get_credentials,
    upload_files,
)

logger = logging.getLogger(__name__)

Authenticator = Callable[..., Credentials]


@dataclass
class UploadReport:
    """Result of an upload run."""

    album_id: str | None
    results: list[MediaItemResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded

    @property
    def success(self) -> bool:
        return self.failed == 0


def run(
    settings: Settings,
    paths: Sequence[Path | str],
    authenticate: Authenticator | None = None,
) -> UploadReport:
    """
    Collect files, authorize, then upload them to the library or a new album.

    Each stage must succeed before the next one starts. Per-item failures of
    the final commit are in the report; every other failure is raised.

    Raises:
        FileDiscoveryError: If a path cannot be traversed
        NoFilesFoundError: If the paths contain no regular files
        AuthenticationError: If authorization is cancelled or fails
        PhotosApiError: If album creation, an upload or a batch commit fails
    """
    authenticate = authenticate or get_credentials
    files = find_files(paths)
    if not files:
        raise NoFilesFoundError(f"File not found in {', '.join(str(p) for p in paths)}")

    logger.info(f"The following {len(files)} files will be uploaded:")
    for i, f in enumerate(files, start=1):
        print(f"{i:3d}: {f}")

    creds = authenticate(
        settings.google_client_id,
        settings.google_client_secret,
        method=settings.oauth_method,
    )

    album_id = None
    if settings.new_album:
        album_id = create_album(creds, settings.new_album)

    uploads = upload_files(creds, files, workers=settings.upload_workers)
    results = batch_create_media_items(creds, uploads, album_id=album_id)
    report = UploadReport(album_id=album_id, results=results)

    for r in report.results:
        if not r.success:
            logger.error(
                f"Could not add {r.path}: {r.message or 'unknown error'} (code {r.status_code})"
            )
    destination = f"album {settings.new_album!r}" if album_id else "the library"
    logger.info(f"Added {report.succeeded}/{len(report.results)} files to {destination}")
    return report
