# photos API logic
import logging
import mimetypes
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

import requests
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from gpup.exceptions import AuthenticationError, FileDiscoveryError, PhotosApiError

logger = logging.getLogger(__name__)

API_BASE = "https://photoslibrary.googleapis.com/v1"

# mediaItems:batchCreate accepts at most 50 new items per call
BATCH_CREATE_LIMIT = 50

_creds_refresh_lock = threading.Lock()


@dataclass
class MediaItemResult:
    """Outcome of creating one media item from an upload token."""

    path: Path
    upload_token: str
    success: bool
    media_item_id: str | None = None
    status_code: int | None = 0
    message: str = ""


def _auth_headers(creds: Credentials) -> dict[str, str]:
    # Uploads run in worker threads; only one of them may refresh
    with _creds_refresh_lock:
        if not creds.valid and creds.refresh_token:
            logger.debug("Access token expired, refreshing")
            try:
                creds.refresh(Request())
            except RefreshError as e:
                raise AuthenticationError(f"Could not refresh access token: {e}") from e
    return {"Authorization": f"Bearer {creds.token}"}


def _api_error(message: str, e: requests.RequestException) -> PhotosApiError:
    status = None
    if isinstance(e, requests.HTTPError) and e.response is not None:
        status = e.response.status_code
    return PhotosApiError(f"{message}: {e}", status_code=status)


def _json_body(r: requests.Response, message: str) -> dict:
    # requests.JSONDecodeError is a ValueError
    try:
        data = r.json()
    except ValueError as e:
        raise PhotosApiError(f"{message}: response is not JSON") from e
    if not isinstance(data, dict):
        raise PhotosApiError(f"{message}: unexpected response of type {type(data).__name__}")
    return data


def create_album(creds: Credentials, title: str) -> str:
    """Create a new Google Photos album and return its ID."""
    headers = {**_auth_headers(creds), "Content-Type": "application/json"}
    try:
        r = requests.post(
            f"{API_BASE}/albums",
            headers=headers,
            json={"album": {"title": title}},
            timeout=30,
        )
        r.raise_for_status()
    except requests.RequestException as e:
        raise _api_error(f"Could not create album {title!r}", e) from e

    album_id = _json_body(r, f"Could not create album {title!r}").get("id")
    if not isinstance(album_id, str) or not album_id:
        raise PhotosApiError(f"Album {title!r} was created without an id in the response")
    logger.info(f"Created album {title!r} ({album_id})")
    return album_id


def upload_file(creds: Credentials, path: Path) -> str:
    """
    Upload the raw bytes of a file.

    Args:
        creds: OAuth credentials
        path: File to upload; streamed, not read into memory

    Returns:
        Upload token to pass to batch_create_media_items

    Raises:
        PhotosApiError: If the request fails or returns no token
        FileDiscoveryError: If the file cannot be opened
    """
    path = Path(path)
    headers = {
        **_auth_headers(creds),
        "Content-Type": "application/octet-stream",
        "X-Goog-Upload-File-Name": path.name,
        "X-Goog-Upload-Protocol": "raw",
    }
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type:
        headers["X-Goog-Upload-Content-Type"] = mime_type

    try:
        with path.open("rb") as f:
            r = requests.post(f"{API_BASE}/uploads", data=f, headers=headers, timeout=60)
        r.raise_for_status()
    except requests.RequestException as e:
        raise _api_error(f"Could not upload {path}", e) from e
    except OSError as e:
        raise FileDiscoveryError(f"Could not read {path}: {e}") from e

    upload_token = r.text
    if not upload_token:
        raise PhotosApiError(f"Upload of {path} returned an empty upload token")
    return upload_token


def upload_files(
    creds: Credentials, files: Sequence[Path], workers: int = 1
) -> list[tuple[Path, str]]:
    """
    Upload every file with a bounded pool of worker threads.

    Returns (path, upload_token) pairs in the order of files. The first failure
    cancels uploads that have not started yet and is raised.
    """
    tokens: dict[int, str] = {}
    total = len(files)
    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = {executor.submit(upload_file, creds, p): i for i, p in enumerate(files)}
        try:
            for future in as_completed(futures):
                i = futures[future]
                tokens[i] = future.result()
                logger.info(f"Uploaded {len(tokens)}/{total}: {files[i]}")
        except BaseException:
            for f in futures:
                f.cancel()
            raise
    return [(p, tokens[i]) for i, p in enumerate(files)]


def _match_results(
    chunk: Sequence[tuple[Path, str]], items: list[dict]
) -> list[MediaItemResult]:
    by_token = {item["uploadToken"]: item for item in items if item.get("uploadToken")}
    results = []
    for i, (path, token) in enumerate(chunk):
        item = by_token.get(token)
        if item is None and i < len(items) and not items[i].get("uploadToken"):
            item = items[i]
        if item is None:
            results.append(
                MediaItemResult(
                    path, token, success=False, status_code=None,
                    message="No result returned for this item",
                )
            )
            continue

        status = item.get("status") or {}
        code = int(status.get("code", 0))
        media_item = item.get("mediaItem") or {}
        results.append(
            MediaItemResult(
                path,
                token,
                success=code == 0,
                media_item_id=media_item.get("id"),
                status_code=code,
                message=status.get("message", ""),
            )
        )
    return results


def _log_committed(results: list[MediaItemResult]) -> None:
    committed = [r for r in results if r.success]
    if not committed:
        return
    logger.warning(f"{len(committed)} item(s) were already added before the failure:")
    for r in committed:
        logger.warning(f"  {r.path}")


def batch_create_media_items(
    creds: Credentials,
    uploads: Sequence[tuple[Path, str]],
    album_id: str | None = None,
) -> list[MediaItemResult]:
    """
    Turn upload tokens into media items, in the library or inside an album.

    Per-item failures are returned in the result list, not raised. Only a
    failure of a whole batchCreate call raises.

    Args:
        creds: OAuth credentials
        uploads: (path, upload_token) pairs from upload_files
        album_id: Album to add the items to, or None for the library only

    Returns:
        One MediaItemResult per upload, in the same order

    Raises:
        PhotosApiError: If a batchCreate request fails at the HTTP level or
            returns a malformed body. Items committed by earlier chunks are
            logged before raising.
    """
    results: list[MediaItemResult] = []
    for start in range(0, len(uploads), BATCH_CREATE_LIMIT):
        chunk = uploads[start : start + BATCH_CREATE_LIMIT]
        body: dict = {
            "newMediaItems": [
                {"simpleMediaItem": {"uploadToken": token, "fileName": path.name}}
                for path, token in chunk
            ]
        }
        if album_id:
            body["albumId"] = album_id

        headers = {**_auth_headers(creds), "Content-Type": "application/json"}
        message = f"Could not create {len(chunk)} media item(s)"
        try:
            r = requests.post(
                f"{API_BASE}/mediaItems:batchCreate",
                headers=headers,
                json=body,
                timeout=60,
            )
            r.raise_for_status()
            items = _json_body(r, message).get("newMediaItemResults", [])
            if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
                raise PhotosApiError(f"{message}: malformed newMediaItemResults")
        except requests.RequestException as e:
            _log_committed(results)
            raise _api_error(message, e) from e
        except PhotosApiError:
            _log_committed(results)
            raise

        chunk_results = _match_results(chunk, items)
        created = sum(1 for res in chunk_results if res.success)
        logger.info(f"Created {created}/{len(chunk)} media items")
        results.extend(chunk_results)
    return results
