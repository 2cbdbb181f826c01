from __future__ import annotations

import html
import logging
from typing import Any

from app.ai.config import load_ai_config
from app.ai.factory import get_ai_client
from app.ai.types import AIClient, ChatMessage
from app.core.errors import InvalidInput
from app.parsing.parse import extract_pdf_text
from app.schemas.portfolio import CvScreenResponse, Project
from app.services.sanitizer import sanitize_link, sanitize_text
from app.services.uploads import UploadedFile

logger = logging.getLogger(__name__)

MAX_RESUME_CHARS = 8000
MAX_SKILLS = 30
MAX_PROJECTS = 12
DEFAULT_PROFICIENCY = 70

SYSTEM_PROMPT = (
    "You turn resumes into content for a one-page personal portfolio website. "
    "Use only facts present in the resume; never invent employers, projects or numbers. "
    "Answer with a single JSON object and nothing else."
)

USER_PROMPT_TEMPLATE = """Resume text:
{resume}

Return JSON with exactly these keys:
{{
  "name": "full name",
  "profession": "current or target job title",
  "tagline": "one sentence mission statement, max 120 characters",
  "summary": "professional summary, 2-4 sentences",
  "about": "first-person personal story, 2-4 sentences",
  "skills": ["up to {max_skills} concrete skills"],
  "skillProficiencies": [integer 0-100 for each skill, same order],
  "projects": [{{"title": "...", "description": "...", "link": "url or empty", "category": "..."}}]
}}"""


class CvScreeningError(RuntimeError):
    def __init__(self, message: str, *, code: str = "llm_unavailable"):
        super().__init__(message)
        self.message = message
        self.code = code


def extract_resume_text(uploaded: UploadedFile) -> str:
    parsed = extract_pdf_text(uploaded.path)
    logger.info("cv_extracted pages=%s with_text=%s", parsed.page_count, parsed.pages_with_text)
    for warning in parsed.parsing_warnings:
        logger.info("cv_parse_warning file=%s: %s", uploaded.path.name, warning)
    return parsed.text


def build_messages(resume_text: str) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=SYSTEM_PROMPT),
        ChatMessage(
            role="user",
            content=USER_PROMPT_TEMPLATE.format(
                resume=resume_text[:MAX_RESUME_CHARS],
                max_skills=MAX_SKILLS,
            ),
        ),
    ]


def _plain(value: Any) -> str:
    # The scaffold is fed back into form fields, so entities are not wanted.
    return html.unescape(sanitize_text(value))


def _proficiency(value: Any) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_PROFICIENCY
    return min(max(number, 0), 100)


def normalize_scaffold(payload: dict[str, Any]) -> CvScreenResponse:
    raw_skills = payload.get("skills") if isinstance(payload.get("skills"), list) else []
    raw_levels = payload.get("skillProficiencies") if isinstance(payload.get("skillProficiencies"), list) else []
    skills: list[str] = []
    levels: list[int] = []
    for index, item in enumerate(raw_skills):
        name = _plain(item)
        if not name or name in skills:
            continue
        skills.append(name)
        levels.append(_proficiency(raw_levels[index]) if index < len(raw_levels) else DEFAULT_PROFICIENCY)
        if len(skills) >= MAX_SKILLS:
            break

    projects: list[Project] = []
    raw_projects = payload.get("projects") if isinstance(payload.get("projects"), list) else []
    for item in raw_projects:
        if not isinstance(item, dict):
            continue
        project = Project(
            title=_plain(item.get("title")),
            description=_plain(item.get("description")),
            link=html.unescape(sanitize_link(item.get("link"))),
            category=_plain(item.get("category")),
        )
        if project.is_publishable:
            projects.append(project)
        if len(projects) >= MAX_PROJECTS:
            break

    return CvScreenResponse(
        name=_plain(payload.get("name")),
        profession=_plain(payload.get("profession")),
        tagline=_plain(payload.get("tagline")),
        summary=_plain(payload.get("summary")),
        about=_plain(payload.get("about")),
        skills=skills,
        skillProficiencies=levels,
        projects=projects,
    )


async def screen_resume(resume_text: str, *, client: AIClient | None = None) -> CvScreenResponse:
    text = (resume_text or "").strip()
    if not text:
        raise InvalidInput("Resume text is empty or could not be extracted")

    if client is None:
        cfg = load_ai_config()
        if not cfg.enabled:
            raise CvScreeningError("CV screening is not configured.", code="llm_disabled")
        try:
            client = get_ai_client()
        except ValueError as exc:
            logger.warning("cv_screen_llm_unavailable: %s", exc)
            raise CvScreeningError("CV screening is not configured.", code="llm_disabled") from exc

    try:
        payload = await client.complete_json(build_messages(text))
    except Exception as exc:  # noqa: BLE001 - any provider failure maps to 503
        logger.warning("cv_screen_llm_failed prompt_len=%s: %s", len(text), exc)
        raise CvScreeningError(
            "CV screening could not produce a valid response. Try again.",
            code="llm_invalid",
        ) from exc
    return normalize_scaffold(payload)
