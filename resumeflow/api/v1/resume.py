from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from resumeflow.core.config import settings
from resumeflow.core.errors import InvalidInput, PayloadTooLarge
from resumeflow.core.rate_limit import rate_limit
from resumeflow.core.security import current_user_id
from resumeflow.schemas.api import ParseResumeResponse
from resumeflow.services.text_extraction import extract
from resumeflow.services.upload_security import ALLOWED_EXTENSIONS, extension_from_filename

router = APIRouter()

_READ_CHUNK_BYTES = 64 * 1024


@router.post("/parse-resume", response_model=ParseResumeResponse)
@rate_limit()
async def parse_resume(
    request: Request,
    file: UploadFile = File(...),
    user_id: str = Depends(current_user_id),
):
    _ = (request, user_id)
    filename = file.filename or "uploaded-file"
    ext = extension_from_filename(filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise InvalidInput(
            f"Unsupported file type '.{ext}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}."
        )

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(_READ_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise PayloadTooLarge(
                f"File too large. Maximum allowed size is {settings.max_upload_bytes // (1024 * 1024)} MB."
            )
        chunks.append(chunk)
    payload = b"".join(chunks)
    if not payload:
        raise InvalidInput("No file uploaded")

    text = await run_in_threadpool(extract, payload, file.content_type, filename)
    return ParseResumeResponse(text=text)
