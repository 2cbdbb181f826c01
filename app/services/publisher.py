from __future__ import annotations

import base64
import hashlib
import html
import json
import logging
import math
import re
import shutil
import time
import unicodedata
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Sequence

from app.core.errors import InvalidInput, PortfolioError, PublishingFailure
from app.integrations.github import GitHubError, PublishingClient
from app.schemas.portfolio import PortfolioForm, PortfolioRequest, Project, SkillEntry
from app.services.renderer import render_site
from app.services.sanitizer import sanitize_link, sanitize_text
from app.services.templates import Template, get_template
from app.services.uploads import UploadedFile, discard_uploads

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Artifact names are fixed: the rendered page links to them relatively.
INDEX_PATH = "index.html"
ROLE_ARTIFACT_PATHS = (("resume", "resume.pdf"), ("headshot", "headshot.jpg"))


class PublishStage(str, Enum):
    VALIDATING = "validating"
    RENDERING = "rendering"
    REPO_PROVISIONING = "repo_provisioning"
    HOSTING_ENABLING = "hosting_enabling"
    LOCAL_STAGING = "local_staging"
    REMOTE_COMMITTING = "remote_committing"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class PublisherConfig:
    owner: str
    staging_root: Path
    default_branch: str = "main"
    commit_message: str = "Add {path}"
    repo_prefix: str = "eportfolio"
    rollback_on_failure: bool = False

    def site_url(self, repo_name: str) -> str:
        return f"https://{self.owner}.github.io/{repo_name}"


@dataclass(frozen=True)
class SiteArtifact:
    path: str
    content: bytes

    @property
    def content_b64(self) -> str:
        return base64.b64encode(self.content).decode("ascii")


@dataclass(frozen=True)
class PublishResult:
    url: str
    repo_name: str
    committed: tuple[str, ...]
    digest: str


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _parse_json_array(raw: str, field_label: str) -> list[Any]:
    text = (raw or "").strip()
    if not text:
        return []
    try:
        value = json.loads(text)
    except ValueError as exc:
        raise InvalidInput(f"{field_label} must be a valid JSON array") from exc
    if not isinstance(value, list):
        raise InvalidInput(f"{field_label} must be a valid JSON array")
    return value


def _coerce_proficiency(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return min(max(number, 0.0), 100.0)


def _sanitize_project(raw: Any) -> Project:
    if not isinstance(raw, dict):
        raise InvalidInput("Each project must be a JSON object")
    return Project(
        title=sanitize_text(raw.get("title")),
        description=sanitize_text(raw.get("description")),
        link=sanitize_link(raw.get("link")) if raw.get("link") else "",
        category=sanitize_text(raw.get("category")),
    )


def parse_portfolio_form(form: PortfolioForm) -> tuple[Template, PortfolioRequest]:
    """Validate raw form fields and return the template plus sanitized content.

    Raises :class:`InvalidInput` for every client-side problem; nothing here
    touches the network or the filesystem.
    """
    if not form.name.strip() or not form.profession.strip() or not form.email.strip():
        raise InvalidInput("Name, profession, and email are required")

    if not EMAIL_PATTERN.match(form.email.strip()):
        raise InvalidInput("Invalid email format")

    template = get_template(form.template)
    if template is None:
        raise InvalidInput("Invalid template selected")

    skills = [sanitize_text(item) for item in _parse_json_array(form.skills, "Skills")]
    proficiencies = _parse_json_array(form.skillProficiencies, "Skill proficiencies")
    projects = [_sanitize_project(item) for item in _parse_json_array(form.projects, "Projects")]

    if len(skills) != len(proficiencies):
        raise InvalidInput("Number of skills and proficiencies must match")

    request = PortfolioRequest(
        name=sanitize_text(form.name),
        profession=sanitize_text(form.profession),
        tagline=sanitize_text(form.tagline),
        summary=sanitize_text(form.summary),
        about=sanitize_text(form.about),
        email=sanitize_text(form.email),
        linkedin=sanitize_link(form.linkedin),
        phone=sanitize_text(form.phone),
        skills=[
            SkillEntry(name=name, proficiency=_coerce_proficiency(level))
            for name, level in zip(skills, proficiencies)
        ],
        projects=projects,
        template=template.name,
    )
    return template, request


def repo_slug(name: str) -> str:
    text = unicodedata.normalize("NFKD", html.unescape(name)).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"\s+", "-", text.strip().lower())
    slug = re.sub(r"[^a-z0-9._-]", "-", slug)
    slug = re.sub(r"-{2,}", "-", slug).strip("-.")
    return slug[:60] or "portfolio"


# ---------------------------------------------------------------------------
# Per-request filesystem scope
# ---------------------------------------------------------------------------


class RequestWorkspace:
    """Owns the staging directory and upload files of one request.

    Leaving the ``with`` block removes both, whatever the outcome; removal
    errors are logged and never replace the request's own result.
    """

    def __init__(self, staging_root: Path, uploads: Sequence[UploadedFile] = ()):
        self._staging_root = Path(staging_root)
        self._uploads = tuple(uploads)
        self.directory: Path | None = None

    def __enter__(self) -> "RequestWorkspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def open(self, name: str) -> Path:
        self.directory = self._staging_root / name
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory

    def write(self, filename: str, content: bytes) -> bytes:
        if self.directory is None:
            raise RuntimeError("workspace directory is not open")
        target = self.directory / filename
        target.write_bytes(content)
        return target.read_bytes()

    def copy_in(self, source: Path, filename: str) -> bytes:
        if self.directory is None:
            raise RuntimeError("workspace directory is not open")
        target = self.directory / filename
        shutil.copyfile(source, target)
        return target.read_bytes()

    def cleanup(self) -> None:
        if self.directory is not None:
            try:
                shutil.rmtree(self.directory)
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("staging_cleanup_failed path=%s: %s", self.directory, exc)
        discard_uploads(self._uploads)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class PortfolioPublisher:
    def __init__(
        self,
        client: PublishingClient | None,
        config: PublisherConfig,
        *,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._config = config
        self._clock = clock

    def repo_name_for(self, display_name: str) -> str:
        stamp = int(self._clock() * 1000)
        return f"{self._config.repo_prefix}-{repo_slug(display_name)}-{stamp}"

    def publish(self, form: PortfolioForm, uploads: Sequence[UploadedFile] = ()) -> PublishResult:
        stage = PublishStage.VALIDATING
        repo_name = ""
        compensations: list[Callable[[], None]] = []
        by_role = {item.role: item for item in uploads}

        def enter(next_stage: PublishStage) -> None:
            nonlocal stage
            stage = next_stage
            logger.info("portfolio_stage stage=%s repo=%s", stage.value, repo_name or "-")

        with RequestWorkspace(self._config.staging_root, uploads) as workspace:
            try:
                enter(PublishStage.VALIDATING)
                template, request = parse_portfolio_form(form)

                enter(PublishStage.RENDERING)
                document = render_site(template, request)
                digest = hashlib.sha256(document.encode("utf-8")).hexdigest()

                client = self._require_client()
                repo_name = self.repo_name_for(request.name)
                site_url = self._config.site_url(repo_name)

                enter(PublishStage.REPO_PROVISIONING)
                branch = self._provision(client, repo_name, site_url, request)
                if self._config.rollback_on_failure:
                    compensations.append(lambda: client.delete_repository(owner=self._config.owner, repo=repo_name))

                enter(PublishStage.HOSTING_ENABLING)
                try:
                    client.enable_pages(owner=self._config.owner, repo=repo_name, branch=branch, path="/")
                except GitHubError as exc:
                    raise PublishingFailure("Failed to enable GitHub Pages") from exc

                enter(PublishStage.LOCAL_STAGING)
                artifacts = self._stage(workspace, repo_name, document, by_role)

                enter(PublishStage.REMOTE_COMMITTING)
                committed = self._commit(client, repo_name, branch, artifacts)

                enter(PublishStage.CLEANING_UP)
            except PortfolioError as exc:
                self._abort(stage, repo_name, exc, compensations)
                raise
            except Exception as exc:
                logger.exception("portfolio_unexpected_error stage=%s repo=%s", stage.value, repo_name or "-")
                failure = PublishingFailure("Failed to generate ePortfolio")
                self._abort(stage, repo_name, failure, compensations)
                raise failure from exc

        enter(PublishStage.DONE)
        logger.info(
            "portfolio_published repo=%s url=%s digest=%s artifacts=%s",
            repo_name,
            site_url,
            digest[:16],
            ",".join(committed),
        )
        return PublishResult(url=site_url, repo_name=repo_name, committed=committed, digest=digest)

    def _require_client(self) -> PublishingClient:
        if self._client is None or not self._config.owner:
            raise PublishingFailure("GitHub publishing is not configured")
        return self._client

    def _provision(self, client: PublishingClient, repo_name: str, site_url: str, request: PortfolioRequest) -> str:
        description = html.unescape(f"{request.name} | {request.profession} Portfolio")
        try:
            created = client.create_repository(
                name=repo_name,
                homepage=site_url,
                description=description[:300],
                auto_init=True,
            )
        except GitHubError as exc:
            raise PublishingFailure("Failed to create GitHub repository") from exc
        return created.default_branch or self._config.default_branch

    def _stage(
        self,
        workspace: RequestWorkspace,
        repo_name: str,
        document: str,
        by_role: dict[str, UploadedFile],
    ) -> list[SiteArtifact]:
        workspace.open(repo_name)
        artifacts = [SiteArtifact(INDEX_PATH, workspace.write(INDEX_PATH, document.encode("utf-8")))]
        for role, path in ROLE_ARTIFACT_PATHS:
            uploaded = by_role.get(role)
            if uploaded is not None:
                artifacts.append(SiteArtifact(path, workspace.copy_in(uploaded.path, path)))
        return artifacts

    def _commit(
        self,
        client: PublishingClient,
        repo_name: str,
        branch: str,
        artifacts: Sequence[SiteArtifact],
    ) -> tuple[str, ...]:
        committed: list[str] = []
        for artifact in artifacts:
            try:
                client.put_file(
                    owner=self._config.owner,
                    repo=repo_name,
                    path=artifact.path,
                    message=self._config.commit_message.format(path=artifact.path),
                    content_b64=artifact.content_b64,
                    branch=branch,
                )
            except GitHubError as exc:
                raise PublishingFailure(f"Failed to commit {artifact.path}") from exc
            committed.append(artifact.path)
        return tuple(committed)

    def _abort(
        self,
        stage: PublishStage,
        repo_name: str,
        exc: PortfolioError,
        compensations: list[Callable[[], None]],
    ) -> None:
        logger.warning(
            "portfolio_stage stage=%s failed_at=%s repo=%s: %s",
            PublishStage.ABORTED.value,
            stage.value,
            repo_name or "-",
            exc.message,
        )
        for action in reversed(compensations):
            try:
                action()
                logger.info("portfolio_rollback_applied repo=%s", repo_name)
            except Exception as rollback_exc:  # noqa: BLE001 - first failure wins
                logger.warning("portfolio_rollback_failed repo=%s: %s", repo_name, rollback_exc)
