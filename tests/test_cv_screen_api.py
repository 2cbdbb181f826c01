import asyncio
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.api.deps import get_upload_handler
from app.core.rate_limit import limiter
from app.main import app
from app.services.cv_screening import CvScreeningError, build_messages, normalize_scaffold, screen_resume
from app.services.uploads import UploadHandler
from support import PDF_BYTES, fixed_clock


class StubAIClient:
    def __init__(self, payload=None, error=None):
        self.payload = payload or {}
        self.error = error
        self.messages = None

    async def complete_json(self, messages):
        self.messages = list(messages)
        if self.error:
            raise self.error
        return self.payload


SCAFFOLD = {
    "name": "Ada Lovelace",
    "profession": "Engineer",
    "tagline": "Poetical science",
    "summary": "Wrote the first published algorithm.",
    "about": "I like engines.",
    "skills": ["Mathematics", "<b>Algorithms</b>", "Mathematics", ""],
    "skillProficiencies": [95, "88.6"],
    "projects": [
        {"title": "Note G", "description": "Bernoulli numbers", "link": "javascript:alert(1)", "category": "Research"},
        {"title": "Untitled", "description": ""},
        "not a project",
    ],
}


class CvScreeningServiceTests(unittest.TestCase):
    def test_normalize_scaffold_cleans_llm_output(self):
        result = normalize_scaffold(SCAFFOLD)
        self.assertEqual(result.name, "Ada Lovelace")
        self.assertEqual(result.skills, ["Mathematics", "Algorithms"])
        self.assertEqual(result.skillProficiencies, [95, 89])
        self.assertEqual(len(result.projects), 1)
        self.assertEqual(result.projects[0].link, "")
        self.assertEqual(len(result.skills), len(result.skillProficiencies))

    def test_missing_proficiencies_get_default(self):
        result = normalize_scaffold({"skills": ["Go", "Rust"], "skillProficiencies": []})
        self.assertEqual(result.skillProficiencies, [70, 70])

    def test_non_finite_proficiencies_get_default(self):
        result = normalize_scaffold(
            {"skills": ["Go", "Rust", "Zig"], "skillProficiencies": [float("inf"), float("nan"), -5]}
        )
        self.assertEqual(result.skillProficiencies, [70, 70, 0])

    def test_unsupported_provider_maps_to_screening_error(self):
        with patch("app.services.cv_screening.load_ai_config") as cfg, patch(
            "app.services.cv_screening.get_ai_client",
            side_effect=ValueError("Unsupported AI_PROVIDER='mystery'"),
        ):
            cfg.return_value.enabled = True
            with self.assertRaises(CvScreeningError) as ctx:
                asyncio.run(screen_resume("resume text"))
        self.assertEqual(ctx.exception.code, "llm_disabled")

    def test_prompt_truncates_resume(self):
        messages = build_messages("x" * 20000)
        self.assertEqual(messages[0].role, "system")
        self.assertLess(len(messages[1].content), 9000)

    def test_screen_resume_uses_client(self):
        stub = StubAIClient(payload=SCAFFOLD)
        result = asyncio.run(screen_resume("Ada Lovelace, engineer", client=stub))
        self.assertEqual(result.profession, "Engineer")
        self.assertIn("Ada Lovelace, engineer", stub.messages[1].content)

    def test_provider_failure_maps_to_screening_error(self):
        stub = StubAIClient(error=ValueError("bad json"))
        with self.assertRaises(CvScreeningError) as ctx:
            asyncio.run(screen_resume("resume text", client=stub))
        self.assertEqual(ctx.exception.code, "llm_invalid")


class CvScreenApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        limiter.reset()
        self._tmp = tempfile.TemporaryDirectory()
        self.upload_dir = Path(self._tmp.name) / "uploads"
        app.dependency_overrides[get_upload_handler] = lambda: UploadHandler(
            self.upload_dir, max_bytes=5 * 1024 * 1024, clock=fixed_clock
        )

    def tearDown(self):
        app.dependency_overrides.clear()
        self._tmp.cleanup()

    def test_disabled_llm_returns_503(self):
        response = self.client.post("/v1/cv/screen", data={"resume_text": "Ada Lovelace"})
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["code"], "llm_disabled")

    def test_empty_input_returns_400(self):
        response = self.client.post("/v1/cv/screen", data={"resume_text": "   "})
        self.assertEqual(response.status_code, 400)

    def test_text_input_returns_scaffold(self):
        stub = StubAIClient(payload=SCAFFOLD)
        with patch("app.services.cv_screening.load_ai_config") as cfg, patch(
            "app.services.cv_screening.get_ai_client", return_value=stub
        ):
            cfg.return_value.enabled = True
            response = self.client.post("/v1/cv/screen", data={"resume_text": "Ada Lovelace, engineer"})
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["name"], "Ada Lovelace")
        self.assertEqual(body["skills"], ["Mathematics", "Algorithms"])

    def test_pdf_upload_is_parsed_and_removed(self):
        with patch("app.api.v1.cv.extract_resume_text", return_value="Extracted resume") as extract, patch(
            "app.services.cv_screening.load_ai_config"
        ) as cfg, patch("app.services.cv_screening.get_ai_client", return_value=StubAIClient(payload=SCAFFOLD)):
            cfg.return_value.enabled = True
            response = self.client.post(
                "/v1/cv/screen",
                files={"cv": ("resume.pdf", PDF_BYTES, "application/pdf")},
            )
        self.assertEqual(response.status_code, 200, response.text)
        stored = extract.call_args.args[0]
        self.assertEqual(stored.role, "resume")
        self.assertFalse(stored.path.exists())

    def test_non_pdf_upload_is_rejected(self):
        response = self.client.post("/v1/cv/screen", files={"cv": ("resume.txt", b"hello", "text/plain")})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "CV must be a PDF file"})


if __name__ == "__main__":
    unittest.main()
