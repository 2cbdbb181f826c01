from __future__ import annotations

import math
import re
from typing import Sequence

from app.schemas.portfolio import PortfolioRequest, Project, SkillEntry
from app.services.templates import Template

PLACEHOLDERS = (
    "name",
    "profession",
    "tagline",
    "summary",
    "about",
    "email",
    "linkedin",
    "phone",
    "keywords",
    "skills",
    "projects",
)
PLACEHOLDER_PATTERN = re.compile(r"\{(" + "|".join(PLACEHOLDERS) + r")\}")

FIELD_DEFAULTS = {
    "name": "Your Name",
    "profession": "Your Profession",
    "tagline": "Your Tagline or Mission Statement",
    "summary": "Describe your professional background, expertise, and key achievements.",
    "about": "Share your personal story, passions, and what drives you in your career.",
    "email": "your.email@example.com",
    "linkedin": "https://linkedin.com",
    "phone": "Your Phone Number",
    "keywords": "your-keywords",
}

KEYWORD_SEPARATOR = ", "


def _neutralize_braces(value: str) -> str:
    # User text must never form a placeholder token in the output.
    return value.replace("{", "&#123;").replace("}", "&#125;")


def _format_percent(value: float) -> str:
    if not math.isfinite(value):
        return "0"
    clamped = min(max(value, 0.0), 100.0)
    return f"{clamped:g}"


def render_skills(skills: Sequence[SkillEntry]) -> str:
    blocks = []
    for index, skill in enumerate(skills):
        label = _neutralize_braces(skill.name) or f"Skill {index + 1}"
        blocks.append(
            f"""
        <div class="skill-item" data-aos="fade-up" data-aos-delay="{100 + index * 100}">
          {label}
          <div class="progress-bar">
            <div class="progress" style="width: {_format_percent(skill.proficiency)}%"></div>
          </div>
        </div>"""
        )
    return "".join(blocks)


def render_projects(projects: Sequence[Project]) -> str:
    blocks = []
    publishable = [project for project in projects if project.is_publishable]
    for index, project in enumerate(publishable):
        link = (
            f'<a href="{_neutralize_braces(project.link)}" target="_blank">View Project</a>'
            if project.link
            else ""
        )
        category = _neutralize_braces(project.category) or "General"
        blocks.append(
            f"""
        <article class="project" data-tilt data-tilt-max="8" data-aos="fade-up" data-aos-delay="{100 + index * 100}">
          <div>
            <h3>{_neutralize_braces(project.title)}</h3>
            <p>{_neutralize_braces(project.description)}</p>
            {link}
            <span class="project-badge">{category}</span>
          </div>
        </article>"""
        )
    return "".join(blocks)


def build_substitutions(request: PortfolioRequest) -> dict[str, str]:
    keywords = KEYWORD_SEPARATOR.join(skill.name for skill in request.skills if skill.name)
    values = {
        "name": request.name,
        "profession": request.profession,
        "tagline": request.tagline,
        "summary": request.summary,
        "about": request.about,
        "email": request.email,
        "linkedin": request.linkedin,
        "phone": request.phone,
        "keywords": keywords,
    }
    substitutions = {
        key: _neutralize_braces(value) or FIELD_DEFAULTS[key] for key, value in values.items()
    }
    substitutions["skills"] = render_skills(request.skills)
    substitutions["projects"] = render_projects(request.projects)
    return substitutions


def render_site(template: Template, request: PortfolioRequest) -> str:
    """Render ``request`` into ``template`` and return the full HTML document.

    Every placeholder occurrence is replaced in a single pass, so text that
    came from the request is never scanned for placeholders again.
    """
    substitutions = build_substitutions(request)
    return PLACEHOLDER_PATTERN.sub(lambda match: substitutions[match.group(1)], template.skeleton)
