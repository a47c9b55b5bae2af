"""
gpup - Upload files and directories to Google Photos.

Walks the given paths, authorizes with OAuth2 and adds every regular file to
the library or to a newly created album.
"""

__version__ = "0.1.0"

from gpup.config import Settings
from gpup.uploader import UploadReport, run

__all__ = [
    "__version__",
    "Settings",
    "UploadReport",
    "run",
]
