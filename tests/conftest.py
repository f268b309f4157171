# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace

import pytest

from leadscrub.db.row_store import MemoryRowStore
from leadscrub.models.row import Row
from leadscrub.providers.base import EmailLookup, EmailVerification, ExtractedText, InferredContact, VerificationStatus


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        for var in (
            "ANTHROPIC_API_KEY",
            "ICYPEAS_API_KEY",
            "ICYPEAS_API_SECRET",
            "MILLIONVERIFIER_API_KEY",
            "DATABASE_URL",
            "PGDSN",
        ):
            monkeypatch.delenv(var, raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """storage:
  backend: memory
enrichment:
  api_delay_seconds: 0
  contact_model: claude-3-5-haiku-latest
scraper:
  timeout_seconds: 5
  max_sub_pages: 2
  max_text_length: 4000
logs_directory: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "leadscrub.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_row() -> Callable[..., Row]:
    """Row builder: make_row({"email": "a@b.com"}, index=0, flags=..., is_duplicate=...)."""
    counter = {"n": 0}

    def _make(data: dict[str, str], index: int | None = None, **kwargs) -> Row:
        if index is None:
            index = counter["n"]
        counter["n"] += 1
        return Row(id=f"row-{index}", list_id="list-1", row_index=index, data=dict(data), **kwargs)

    return _make


@pytest.fixture()
def memory_store() -> MemoryRowStore:
    return MemoryRowStore()


class StubExtractor:
    def __init__(self, text: str = "About us: Jane Doe, Owner", error: str | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[str] = []

    def extract(self, url: str) -> ExtractedText:
        self.calls.append(url)
        if self.error:
            return ExtractedText(text="", error=self.error)
        return ExtractedText(text=self.text)


class StubInferrer:
    def __init__(self, contact: InferredContact | None = None) -> None:
        self.contact = contact or InferredContact(first_name="Jane", last_name="Doe", title="Owner", confidence=0.9)
        self.calls: list[tuple[str, dict[str, str]]] = []

    def infer(self, text: str, context: dict[str, str]) -> InferredContact:
        self.calls.append((text, context))
        return self.contact


class StubFinder:
    def __init__(self, emails: dict[str, str] | None = None, error: str | None = None) -> None:
        # domain -> email
        self.emails = emails or {}
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    def find(self, first_name: str, last_name: str, domain: str) -> EmailLookup:
        self.calls.append((first_name, last_name, domain))
        if self.error:
            return EmailLookup(error=self.error)
        return EmailLookup(email=self.emails.get(domain))


class StubVerifier:
    def __init__(self, statuses: dict[str, str] | None = None, default: str = "valid", error: str | None = None) -> None:
        self.statuses = statuses or {}
        self.default = default
        self.error = error
        self.calls: list[str] = []

    def verify(self, email: str) -> EmailVerification:
        self.calls.append(email)
        role = email.split("@")[0] in {"info", "support", "sales"}
        if self.error:
            return EmailVerification(status=VerificationStatus.UNKNOWN, is_role_account=role, error=self.error)
        status = VerificationStatus(self.statuses.get(email, self.default))
        return EmailVerification(status=status, is_role_account=role)


@pytest.fixture()
def stub_providers() -> dict[str, object]:
    return {
        "extractor": StubExtractor(),
        "inferrer": StubInferrer(),
        "finder": StubFinder({"acme.com": "jane.doe@acme.com"}),
        "verifier": StubVerifier(),
    }


@pytest.fixture()
def stubs() -> SimpleNamespace:
    """Stub provider classes, for tests that need non-default behaviour."""
    return SimpleNamespace(
        Extractor=StubExtractor,
        Inferrer=StubInferrer,
        Finder=StubFinder,
        Verifier=StubVerifier,
    )
