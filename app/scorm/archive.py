"""Package archive extraction and manifest lookup.

``extract_archive`` unpacks an in-memory zip onto disk, mirroring the
archive's internal layout under the output directory. ``find_manifest`` then
locates ``imsmanifest.xml`` anywhere in the extracted tree.

Entry names are written as-is. Archives containing ``../`` or absolute entry
names can write outside the output directory; such entries are logged but
not sanitized.
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import zipfile
import zlib
from pathlib import Path
from typing import List, Union

from app.scorm.errors import ArchiveError, MissingManifestError

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "imsmanifest.xml"

PathLike = Union[str, os.PathLike]


def _escapes(root: Path, target: Path) -> bool:
    try:
        target.resolve().relative_to(root.resolve())
    except ValueError:
        return True
    return False


def extract_archive(data: bytes, out_dir: PathLike) -> List[Path]:
    """
    Extract zip archive bytes into ``out_dir``.

    Args:
        data: Raw bytes of the zip archive
        out_dir: Directory to extract into (created if absent)

    Returns:
        Paths of the regular files written, in archive order

    Raises:
        ArchiveError: If the archive is corrupt, an entry cannot be read, or
            a target path cannot be created or written
    """
    out_dir = Path(out_dir)
    written: List[Path] = []
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            for info in archive.infolist():
                target = out_dir / info.filename
                if _escapes(out_dir, target):
                    logger.warning(
                        "Archive entry %r resolves outside %s", info.filename, out_dir
                    )
                if info.filename.endswith("/"):
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                written.append(target)
    except (zipfile.BadZipFile, zlib.error, EOFError) as e:
        raise ArchiveError(f"corrupt package archive: {e}") from e
    except (NotImplementedError, RuntimeError) as e:
        # unsupported compression method or encrypted entry
        raise ArchiveError(f"unreadable archive entry: {e}") from e
    except OSError as e:
        raise ArchiveError(f"failed to write extracted file: {e}") from e

    logger.info("Extracted %d files to %s", len(written), out_dir)
    return written


def find_manifest(root: PathLike) -> Path:
    """
    Return the first ``imsmanifest.xml`` found below ``root``.

    The walk is top-down; within a directory, files are checked before
    descending and names are visited in sorted order.

    Raises:
        MissingManifestError: If no manifest exists or the walk fails
    """

    def _on_error(err: OSError) -> None:
        raise MissingManifestError(f"cannot read package directory: {err}") from err

    root = Path(root)
    if not root.is_dir():
        raise MissingManifestError(f"package directory not found: {root}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames.sort()
        for name in sorted(filenames):
            if name == MANIFEST_FILENAME:
                return Path(dirpath) / name
    raise MissingManifestError()
