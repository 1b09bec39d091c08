from __future__ import annotations

import base64
import binascii
import logging
import re

from fastapi import APIRouter, Depends, HTTPException, status

from ..schemas import FileUploadRequest
from ..store import StoreClient, get_store
from ..utils import method_not_allowed, success_envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])

DEFAULT_MIME_TYPE = "application/octet-stream"
_DATA_URL_PREFIX = re.compile(r"^data:[^,]*;base64,", re.IGNORECASE)


def decode_file_content(content: str) -> bytes:
    """
    Decode base64 upload content. A `data:<mime>;base64,` prefix and any
    whitespace are ignored.

    Raises:
        ValueError if the remainder is not valid base64.
    """
    payload = _DATA_URL_PREFIX.sub("", content.strip())
    payload = re.sub(r"\s+", "", payload)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Invalid base64 file content") from e


# PUBLIC_INTERFACE
@router.post(
    "/upload",
    summary="Upload File",
    description="Store base64 content at bucket/filePath and return its public URL.",
    responses={
        400: {"description": "Missing fields or invalid base64"},
        405: {"description": "Only POST is accepted"},
        500: {"description": "Storage failure"},
    },
)
def upload_file(payload: FileUploadRequest, store: StoreClient = Depends(get_store)):
    missing = payload.missing_fields()
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required fields: {', '.join(missing)}",
        )

    try:
        content = decode_file_content(payload.fileContent or "")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    url = store.upload(
        payload.bucket,  # type: ignore[arg-type]
        payload.filePath,  # type: ignore[arg-type]
        content,
        payload.mimeType or DEFAULT_MIME_TYPE,
    )
    logger.info("Uploaded %d bytes to %s/%s", len(content), payload.bucket, payload.filePath)
    return success_envelope(url)


@router.api_route("/upload", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def upload_method_not_allowed():
    return method_not_allowed(["POST"])
