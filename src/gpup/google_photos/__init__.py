"""
Google Photos API integration.

Provides OAuth authorization and media upload functionality.
"""

from gpup.google_photos.api import (
    BATCH_CREATE_LIMIT,
    MediaItemResult,
    batch_create_media_items,
    create_album,
    upload_file,
    upload_files,
)
from gpup.google_photos.auth import SCOPES, get_credentials

__all__ = [
    "get_credentials",
    "create_album",
    "upload_file",
    "upload_files",
    "batch_create_media_items",
    "MediaItemResult",
    "BATCH_CREATE_LIMIT",
    "SCOPES",
]
