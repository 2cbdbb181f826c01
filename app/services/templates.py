from __future__ import annotations

from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from string import Template as _Skeleton
from types import MappingProxyType
from typing import Mapping

SKELETON_PATH = Path(__file__).resolve().parent.parent / "templates" / "portfolio.html"


@dataclass(frozen=True)
class ColorScheme:
    body_bg: str
    text: str
    nav_bg: str
    nav_text: str
    accent: str
    accent_gradient: str
    accent_hover: str
    accent_hover_solid: str
    hero_bg: str
    hero_overlay: str
    hero_text: str
    button_bg: str
    button_hover: str
    button_text: str
    section_bg: str
    skill_bg: str
    skill_hover_text: str
    progress_bg: str
    project_bg: str
    secondary_text: str
    footer_bg: str


@dataclass(frozen=True)
class Template:
    name: str
    colors: ColorScheme

    @property
    def skeleton(self) -> str:
        """Markup with colors applied and content placeholders still in place."""
        return _styled_skeleton(self.colors)


@lru_cache(maxsize=1)
def _base_skeleton() -> str:
    return SKELETON_PATH.read_text(encoding="utf-8")


@lru_cache(maxsize=8)
def _styled_skeleton(colors: ColorScheme) -> str:
    return _Skeleton(_base_skeleton()).substitute(asdict(colors))


TEMPLATES: Mapping[str, Template] = MappingProxyType(
    {
        "default": Template(
            name="default",
            colors=ColorScheme(
                body_bg="linear-gradient(135deg, #f9fafb 0%, #e5e7eb 100%)",
                text="#1f2937",
                nav_bg="linear-gradient(90deg, #1e3a8a 0%, #3b82f6 100%)",
                nav_text="#f9fafb",
                accent="#f59e0b",
                accent_gradient="linear-gradient(90deg, #f59e0b, #d97706)",
                accent_hover="rgba(245, 158, 11, 0.3)",
                accent_hover_solid="#d97706",
                hero_bg="linear-gradient(135deg, #1e3a8a 0%, #3b82f6 100%)",
                hero_overlay="rgba(30, 58, 138, 0.7)",
                hero_text="#f9fafb",
                button_bg="linear-gradient(90deg, #f59e0b 0%, #d97706 100%)",
                button_hover="linear-gradient(90deg, #d97706 0%, #b45309 100%)",
                button_text="#1f2937",
                section_bg="rgba(255, 255, 255, 0.98)",
                skill_bg="linear-gradient(135deg, #e5e7eb 0%, #f9fafb 100%)",
                skill_hover_text="#1f2937",
                progress_bg="#e5e7eb",
                project_bg="#f9fafb",
                secondary_text="#6b7280",
                footer_bg="#1e3a8a",
            ),
        ),
        "dark": Template(
            name="dark",
            colors=ColorScheme(
                body_bg="linear-gradient(135deg, #111827 0%, #1f2937 100%)",
                text="#e5e7eb",
                nav_bg="linear-gradient(90deg, #111827 0%, #1f2937 100%)",
                nav_text="#e5e7eb",
                accent="#0ea5e9",
                accent_gradient="linear-gradient(90deg, #0ea5e9, #0284c7)",
                accent_hover="rgba(14, 165, 233, 0.3)",
                accent_hover_solid="#0284c7",
                hero_bg="linear-gradient(135deg, #111827 0%, #1f2937 100%)",
                hero_overlay="rgba(17, 24, 39, 0.7)",
                hero_text="#e5e7eb",
                button_bg="linear-gradient(90deg, #0ea5e9 0%, #0284c7 100%)",
                button_hover="linear-gradient(90deg, #0284c7 0%, #0369a1 100%)",
                button_text="#111827",
                section_bg="rgba(31, 41, 55, 0.98)",
                skill_bg="linear-gradient(135deg, #1f2937 0%, #374151 100%)",
                skill_hover_text="#111827",
                progress_bg="#374151",
                project_bg="#1f2937",
                secondary_text="#9ca3af",
                footer_bg="#111827",
            ),
        ),
        "vibrant": Template(
            name="vibrant",
            colors=ColorScheme(
                body_bg="#f9fafb",
                text="#111827",
                nav_bg="#1e3a8a",
                nav_text="#ffffff",
                accent="#0ea5e9",
                accent_gradient="linear-gradient(90deg, #0ea5e9, #2563eb)",
                accent_hover="rgba(14, 165, 233, 0.1)",
                accent_hover_solid="#2563eb",
                hero_bg="linear-gradient(135deg, #1e3a8a 0%, #2563eb 100%)",
                hero_overlay="rgba(30, 58, 138, 0.6)",
                hero_text="#ffffff",
                button_bg="linear-gradient(90deg, #0ea5e9 0%, #2563eb 100%)",
                button_hover="linear-gradient(90deg, #2563eb 0%, #1e3a8a 100%)",
                button_text="#ffffff",
                section_bg="#ffffff",
                skill_bg="#f1f5f9",
                skill_hover_text="#0ea5e9",
                progress_bg="#e5e7eb",
                project_bg="#f9fafb",
                secondary_text="#6b7280",
                footer_bg="#1e3a8a",
            ),
        ),
    }
)


def get_template(name: str | None) -> Template | None:
    key = (name or "").strip()
    return TEMPLATES.get(key)
