from __future__ import annotations

from pydantic import BaseModel, Field


class ExtractedPdf(BaseModel):
    text: str
    page_count: int = 0
    pages_with_text: int = 0
    parsing_warnings: list[str] = Field(default_factory=list)
