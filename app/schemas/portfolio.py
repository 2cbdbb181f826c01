from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class PortfolioForm(BaseModel):
    """Raw multipart fields exactly as the client submits them."""

    name: str = ""
    profession: str = ""
    tagline: str = ""
    summary: str = ""
    about: str = ""
    email: str = ""
    linkedin: str = ""
    phone: str = ""
    skills: str = ""
    skillProficiencies: str = ""
    projects: str = ""
    template: str = ""


class Project(BaseModel):
    title: str = ""
    description: str = ""
    link: str = ""
    category: str = ""

    @field_validator("title", "description", "link", "category", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @property
    def is_publishable(self) -> bool:
        return bool(self.title and self.description)


class SkillEntry(BaseModel):
    name: str = ""
    proficiency: float = Field(default=0.0, ge=0.0, le=100.0)


class PortfolioRequest(BaseModel):
    """Validated and sanitized portfolio content, ready for rendering."""

    name: str
    profession: str
    tagline: str = ""
    summary: str = ""
    about: str = ""
    email: str
    linkedin: str = ""
    phone: str = ""
    skills: list[SkillEntry] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    template: str


class GenerateResponse(BaseModel):
    url: str


class ErrorResponse(BaseModel):
    error: str


class CvScreenResponse(BaseModel):
    name: str = ""
    profession: str = ""
    tagline: str = ""
    summary: str = ""
    about: str = ""
    skills: list[str] = Field(default_factory=list, max_length=30)
    skillProficiencies: list[int] = Field(default_factory=list, max_length=30)
    projects: list[Project] = Field(default_factory=list, max_length=12)
