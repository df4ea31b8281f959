"""Static serving of extracted package content below DATA_DIR."""

import logging
import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from app.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Content"])


@router.get("/content/{file_path:path}", summary="Serve Package Content")
async def serve_content_file(
    file_path: str, settings: Settings = Depends(get_settings)
) -> FileResponse:
    """
    Serve a file from an extracted package.

    Args:
        file_path: Path relative to DATA_DIR, e.g. ``courses/<id>/index.html``

    Raises:
        HTTPException: 403 when the path escapes DATA_DIR, 404 when missing
    """
    root = settings.data_dir.resolve()
    resolved_path = (root / file_path).resolve()

    # Security check - ensure path is within the data directory
    if not resolved_path.is_relative_to(root):
        logger.warning(f"Path traversal attempt detected: {file_path}")
        raise HTTPException(status_code=403, detail="Access denied")

    if not resolved_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    mime_type, _ = mimetypes.guess_type(str(resolved_path))
    return FileResponse(
        path=resolved_path,
        media_type=mime_type or "application/octet-stream",
    )
