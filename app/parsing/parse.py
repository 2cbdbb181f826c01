from __future__ import annotations

from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from .models import ExtractedPdf


def extract_pdf_text(file_path: str | Path) -> ExtractedPdf:
    """Pull the text layer out of a PDF, one paragraph per page.

    Unreadable files do not raise; they come back empty with a warning so the
    caller can report "could not be extracted" as an input problem.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Input document not found: '{path}'")

    warnings: list[str] = []
    try:
        reader = PdfReader(str(path))
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except (PdfReadError, ValueError, OSError) as exc:
        return ExtractedPdf(text="", parsing_warnings=[f"PDF parsing failed: {exc}"])

    text_parts = [text for text in pages if text]
    if not text_parts:
        warnings.append("No extractable text found in PDF.")
    return ExtractedPdf(
        text="\n".join(text_parts),
        page_count=len(pages),
        pages_with_text=len(text_parts),
        parsing_warnings=warnings,
    )
