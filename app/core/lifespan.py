import contextlib
from contextlib import asynccontextmanager
import asyncio
import logging
import shutil
import time
from pathlib import Path

from app.core.config import settings

logger = logging.getLogger(__name__)

PURGE_INTERVAL_S = 3600


def purge_stale_files(now: float | None = None) -> dict[str, int]:
    """Remove uploads and staging folders left behind by crashed requests."""
    cutoff = (now if now is not None else time.time()) - settings.upload_retention_hours * 3600
    deleted = {"uploads": 0, "staging": 0}

    upload_dir = Path(settings.upload_dir)
    if upload_dir.is_dir():
        for entry in upload_dir.iterdir():
            if entry.is_file() and entry.stat().st_mtime < cutoff:
                entry.unlink(missing_ok=True)
                deleted["uploads"] += 1

    staging_dir = Path(settings.staging_dir)
    if staging_dir.is_dir():
        for entry in staging_dir.iterdir():
            if entry.is_dir() and entry.stat().st_mtime < cutoff:
                shutil.rmtree(entry, ignore_errors=True)
                deleted["staging"] += 1
    return deleted


@asynccontextmanager
async def lifespan(app):
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    Path(settings.staging_dir).mkdir(parents=True, exist_ok=True)
    if not settings.github_configured:
        logger.warning("GITHUB_TOKEN and GITHUB_USER are not set; portfolio publishing will fail.")

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                deleted = await asyncio.to_thread(purge_stale_files)
                if any(deleted.values()):
                    logger.info("stale_file_purge deleted=%s", deleted)
            except Exception as exc:  # pragma: no cover
                logger.warning("stale_file_purge_failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=PURGE_INTERVAL_S)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
