from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from app.core.config import settings
from app.integrations.github import GitHubClient
from app.services.publisher import PortfolioPublisher, PublisherConfig
from app.services.uploads import UploadHandler


@lru_cache(maxsize=1)
def _github_client() -> GitHubClient | None:
    if not settings.github_configured:
        return None
    return GitHubClient(
        settings.github_token or "",
        base_url=settings.github_api_url,
        timeout_s=settings.github_timeout_s,
    )


def publisher_config() -> PublisherConfig:
    return PublisherConfig(
        owner=settings.github_user or "",
        staging_root=Path(settings.staging_dir),
        default_branch=settings.github_default_branch,
        rollback_on_failure=settings.publish_rollback_on_failure,
    )


def get_publisher() -> PortfolioPublisher:
    return PortfolioPublisher(_github_client(), publisher_config())


def get_upload_handler() -> UploadHandler:
    return UploadHandler(
        settings.upload_dir,
        max_bytes=settings.upload_max_bytes,
        verify_signature=settings.upload_verify_signature,
    )
