import asyncio

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from app.api.deps import get_publisher, get_upload_handler
from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.schemas.portfolio import ErrorResponse, GenerateResponse, PortfolioForm
from app.services.publisher import PortfolioPublisher
from app.services.uploads import UploadHandler

router = APIRouter()

GENERATE_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid form fields or uploads."},
    500: {"model": ErrorResponse, "description": "Publishing to GitHub failed."},
}


@rate_limit(settings.generate_rate_limit)
async def generate_portfolio(
    request: Request,
    name: str = Form(""),
    profession: str = Form(""),
    tagline: str = Form(""),
    summary: str = Form(""),
    about: str = Form(""),
    email: str = Form(""),
    linkedin: str = Form(""),
    phone: str = Form(""),
    skills: str = Form(""),
    skill_proficiencies: str = Form("", alias="skillProficiencies"),
    projects: str = Form(""),
    template: str = Form(""),
    cv: list[UploadFile] | None = File(default=None),
    image: list[UploadFile] | None = File(default=None),
    publisher: PortfolioPublisher = Depends(get_publisher),
    upload_handler: UploadHandler = Depends(get_upload_handler),
):
    _ = request
    form = PortfolioForm(
        name=name,
        profession=profession,
        tagline=tagline,
        summary=summary,
        about=about,
        email=email,
        linkedin=linkedin,
        phone=phone,
        skills=skills,
        skillProficiencies=skill_proficiencies,
        projects=projects,
        template=template,
    )
    stored = await upload_handler.receive_all({"cv": cv, "image": image})
    result = await asyncio.to_thread(publisher.publish, form, stored)
    return GenerateResponse(url=result.url)


router.add_api_route(
    "/portfolio/generate",
    generate_portfolio,
    methods=["POST"],
    response_model=GenerateResponse,
    responses=GENERATE_RESPONSES,
    summary="Generate and publish a portfolio site",
)

# Path used by the existing frontend.
legacy_router = APIRouter()
legacy_router.add_api_route(
    "/api/generate",
    generate_portfolio,
    methods=["POST"],
    response_model=GenerateResponse,
    responses=GENERATE_RESPONSES,
    include_in_schema=False,
)
