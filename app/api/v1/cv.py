import asyncio

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import JSONResponse

from app.api.deps import get_upload_handler
from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.schemas.portfolio import CvScreenResponse, ErrorResponse
from app.services.cv_screening import CvScreeningError, extract_resume_text, screen_resume
from app.services.uploads import UploadHandler, discard_uploads

router = APIRouter()


async def cv_screening_error_handler(request: Request, exc: CvScreeningError) -> JSONResponse:
    _ = request
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": exc.message, "code": exc.code},
    )


@router.post(
    "/cv/screen",
    response_model=CvScreenResponse,
    responses={
        400: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Draft portfolio content from a resume",
)
@rate_limit(settings.cv_screen_rate_limit)
async def cv_screen(
    request: Request,
    resume_text: str = Form(""),
    cv: list[UploadFile] | None = File(default=None),
    upload_handler: UploadHandler = Depends(get_upload_handler),
):
    _ = request
    stored = await upload_handler.receive_all({"cv": cv})
    try:
        text = await asyncio.to_thread(extract_resume_text, stored[0]) if stored else resume_text
    finally:
        discard_uploads(stored)
    return await screen_resume(text)
