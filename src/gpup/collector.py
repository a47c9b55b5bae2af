# file discovery
import logging
import stat
from collections.abc import Iterable, Iterator
from pathlib import Path

from gpup.exceptions import FileDiscoveryError

logger = logging.getLogger(__name__)


def _walk(p: Path) -> Iterator[Path]:
    mode = p.lstat().st_mode
    if stat.S_ISREG(mode):
        yield p
    elif stat.S_ISDIR(mode):
        for child in sorted(p.iterdir(), key=lambda c: c.name):
            yield from _walk(child)
    else:
        logger.debug(f"Skipping non-regular file: {p}")


def find_files(paths: Iterable[Path | str]) -> list[Path]:
    """
    Expand files and directories into the list of regular files to upload.

    Directories are walked recursively in lexical order. Symlinks and special
    files are skipped, including when given directly.

    Args:
        paths: Files or directories, in the order given on the command line

    Returns:
        Regular files, roots in argument order

    Raises:
        FileDiscoveryError: If a root is missing or a directory cannot be listed
    """
    files: list[Path] = []
    for parent in paths:
        parent = Path(parent)
        try:
            files.extend(_walk(parent))
        except OSError as e:
            raise FileDiscoveryError(f"Error while finding files in {parent}: {e}") from e
    return files
