"""
SCORM Package Ingestion Service
Unpacks an uploaded content package and resolves its launch paths
"""

import logging
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from app.scorm.archive import extract_archive, find_manifest
from app.scorm.manifest_parser import parse_manifest_file
from app.scorm.models import ParsedManifest

logger = logging.getLogger(__name__)

COURSES_SUBDIR = "courses"


@dataclass
class IngestResult:
    """Outcome of a successful ingestion, ready to be persisted."""

    course_id: str
    base_path: str
    package_dir: Path
    manifest: ParsedManifest


class PackageIngestService:
    """Extracts packages below ``<data_dir>/courses/<course_id>``"""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def package_dir(self, course_id: str) -> Path:
        return self.data_dir / COURSES_SUBDIR / course_id

    def ingest(self, data: bytes, course_id: Optional[str] = None) -> IngestResult:
        """
        Extract a package and resolve its manifest.

        Args:
            data: Raw zip archive bytes
            course_id: Identifier to extract under (a new UUID when omitted)

        Returns:
            IngestResult whose ``base_path`` is the manifest's directory
            relative to the data directory, using forward slashes

        Raises:
            ScormPackageError: Any ingestion failure; the partially extracted
                directory is left in place for the caller to discard
        """
        course_id = course_id or str(uuid.uuid4())
        package_dir = self.package_dir(course_id)
        logger.info(f"Ingesting package {course_id} into {package_dir}")

        extract_archive(data, package_dir)
        manifest_path = find_manifest(package_dir)
        logger.info(f"Found manifest: {manifest_path}")
        manifest = parse_manifest_file(manifest_path)

        base_path = manifest_path.parent.relative_to(self.data_dir).as_posix()
        logger.info(
            f"Package {course_id} resolved: launch={manifest.default_launch} "
            f"scos={len(manifest.scos)}"
        )
        return IngestResult(
            course_id=course_id,
            base_path=base_path,
            package_dir=package_dir,
            manifest=manifest,
        )

    def discard(self, course_id: str) -> None:
        """Remove a package directory, ignoring one that is already gone."""
        package_dir = self.package_dir(course_id)
        if package_dir.exists():
            shutil.rmtree(package_dir)
            logger.info(f"Removed package directory {package_dir}")
