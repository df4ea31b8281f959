"""Error kinds raised while ingesting a SCORM content package.

Every ingestion failure is fatal for the package being ingested: the caller
aborts and persists nothing. Tracking-value rejections are not exceptions,
see ``app.scorm.cmi``.
"""

from typing import Optional


class ScormPackageError(Exception):
    """Base class for package ingestion failures."""

    default_message = "invalid SCORM package"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ArchiveError(ScormPackageError):
    """Raised when the zip archive cannot be read or written to disk."""

    default_message = "failed to extract package archive"


class MissingManifestError(ScormPackageError):
    """Raised when no readable imsmanifest.xml exists in the package."""

    default_message = "imsmanifest.xml not found"


class MalformedManifestError(ScormPackageError):
    """Raised when the manifest is not well-formed UTF-8 XML."""

    default_message = "failed to parse manifest"


class UnresolvableLaunchError(ScormPackageError):
    """Raised when no item or resource yields a usable launch href."""

    default_message = "no launch path could be resolved from manifest"
