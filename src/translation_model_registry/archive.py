"""Extraction of gzip-compressed tar model archives.

Archives are read as a stream so that both regular files and HTTP download bodies
can be extracted without seeking. Every entry is written below an explicit
destination directory; the process working directory is never changed.
"""

import os
import posixpath
import tarfile
from pathlib import Path
from typing import IO, List, Sequence

from .errors import ExtractError
from .logging import LogEvent, get_logger, log_debug, log_error

logger = get_logger(__name__)

# The "data" filter rejects absolute paths, ".." traversal and special files.
_EXTRACT_KWARGS = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}


def _entry_name(member: tarfile.TarInfo) -> str:
    """Return the archive path of an entry, with a trailing slash for directories."""
    if member.isdir() and not member.name.endswith("/"):
        return member.name + "/"
    return member.name


def extract_tar_gz(source: IO[bytes], destination: Path) -> List[str]:
    """Extract a tar.gz stream into ``destination``.

    Entries are extracted in archive order and their modification times are kept.
    Already written entries are left on disk when extraction fails; the caller owns
    the destination and is expected to discard it.

    Args:
        source: Binary stream positioned at the start of the archive
        destination: Directory to extract into, created if absent

    Returns:
        Archive paths of the extracted entries (relative to ``destination``), in
        encounter order. Directory entries end with ``/``. An archive without
        entries yields an empty list.

    Raises:
        ExtractError: If the archive is malformed or an entry cannot be written
    """
    try:
        destination.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExtractError(f"Could not create extraction directory {destination}: {e}") from e

    extracted: List[str] = []
    directories: List[tarfile.TarInfo] = []
    current = None
    try:
        with tarfile.open(fileobj=source, mode="r|gz") as tar:
            for member in tar:
                current = member.name
                tar.extract(member, path=str(destination), set_attrs=True, **_EXTRACT_KWARGS)
                extracted.append(_entry_name(member))
                if member.isdir():
                    directories.append(member)

        # Directory times are applied once their children are written, deepest first
        directories.sort(key=lambda m: m.name, reverse=True)
        for member in directories:
            current = member.name
            os.utime(destination / member.name, (member.mtime, member.mtime))
    except (tarfile.TarError, OSError, EOFError) as e:
        log_error(
            LogEvent.ARCHIVE_EXTRACT,
            f"Trouble while extracting model archive: {e}",
            entry=current,
            destination=str(destination),
        )
        raise ExtractError(f"Trouble while extracting model archive: {e}", entry=current) from e

    log_debug(LogEvent.ARCHIVE_EXTRACT, f"Extracted {len(extracted)} entries", destination=str(destination))
    return extracted


def common_prefix_path(paths: Sequence[str]) -> str:
    """Find the directory shared by every path in ``paths``.

    The comparison is done on the path strings, so a single path yields its
    containing directory and directory entries are expected to end with ``/``.

    Args:
        paths: Slash separated paths

    Returns:
        The shared directory, or an empty string if there is none
    """
    if not paths:
        return ""

    prefix = os.path.commonprefix(list(paths))
    if "/" not in prefix:
        return ""
    return prefix.rsplit("/", 1)[0]


def join_entries(destination: Path, entries: Sequence[str]) -> List[str]:
    """Join archive entry names onto ``destination`` using slash separators."""
    base = destination.as_posix().rstrip("/")
    return [posixpath.join(base, entry) for entry in entries]
