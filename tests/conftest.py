import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read once at import time, so the environment is pinned before
# any test module imports the application.
_SCRATCH = Path(tempfile.mkdtemp(prefix="eportfolio-tests-"))
os.environ["UPLOAD_DIR"] = str(_SCRATCH / "uploads")
os.environ["STAGING_DIR"] = str(_SCRATCH / "temp")
os.environ["GITHUB_TOKEN"] = ""
os.environ["GITHUB_USER"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "1"
os.environ["GENERATE_RATE_LIMIT"] = "5/minute"
os.environ["CV_SCREEN_RATE_LIMIT"] = "5/minute"
os.environ["CV_SCREEN_LLM_ENABLED"] = "0"
os.environ["SENTRY_DSN"] = ""
