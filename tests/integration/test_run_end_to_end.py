from __future__ import annotations

import csv
import json
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from leadscrub.cli.__main__ import main as cli_main
from leadscrub.logging.init import reset_logging

HOMEPAGE = "<html><body><h1>Acme Golf</h1><p>Jane Doe, Owner and Head Pro.</p></body></html>"
MV_URL = "https://api.millionverifier.com/api/v3/"
MV_RESULTS = {"jane@acme.com": "catch_all", "info@biz.io": "ok"}


def _response(*, text: str = "", payload=None, status: int = 200, content_type: str = "text/html"):
    resp = MagicMock()
    resp.ok = status < 400
    resp.status_code = status
    resp.headers = {"content-type": content_type}
    resp.text = text
    resp.json.return_value = payload
    return resp


def _fake_get(url, headers=None, params=None, timeout=None):
    if url == MV_URL:
        return _response(payload={"result": MV_RESULTS.get(params["email"], "unknown")})
    if url == "https://acme.com":
        return _response(text=HOMEPAGE)
    return _response(status=404)


@pytest.fixture()
def http_session():
    session = MagicMock()
    session.get.side_effect = _fake_get
    # Icypeas finds nothing for this domain
    session.post.return_value = _response(payload={"status": "NOT_FOUND", "emails": []})
    return session


@pytest.fixture()
def claude_client():
    client = MagicMock()
    client.messages.create.return_value = SimpleNamespace(
        content=[SimpleNamespace(type="text", text='{"first_name": "Jane", "last_name": "Doe", "title": "Owner", "confidence": 0.9}')]
    )
    return client


@pytest.fixture()
def credentials(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-anthropic")
    monkeypatch.setenv("ICYPEAS_API_KEY", "test-key")
    monkeypatch.setenv("ICYPEAS_API_SECRET", "test-secret")
    monkeypatch.setenv("MILLIONVERIFIER_API_KEY", "test-mv")


def test_run_end_to_end(write_config, temp_workdir: Path, credentials, http_session, claude_client, capsys):
    reset_logging()
    src = temp_workdir / "data" / "leads.csv"
    src.write_text("Company,Website,Email\nAcme Golf,acme.com,\nBiz Co,,info@biz.io\n", encoding="utf-8")
    out_csv = temp_workdir / "out" / "leads.csv"

    with patch("leadscrub.services.orchestrator.requests.Session", return_value=http_session), \
         patch("leadscrub.providers.contact_inference.anthropic.Anthropic", return_value=claude_client):
        code = cli_main(["run", str(src), "-o", str(out_csv)])

    out = capsys.readouterr().out
    assert code == 0
    assert (
        "SUMMARY enrichment contacts=1 found=0 patterns=1 verified=2 valid=1 "
        "invalid=0 risky=1 unknown=0 role=1 skipped=0 errors=0"
    ) in out

    with out_csv.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert rows[0]["First Name"] == "Jane"
    assert rows[0]["Last Name"] == "Doe"
    assert rows[0]["Title"] == "Owner"
    assert rows[0]["Email"] == "jane@acme.com"
    assert rows[0]["enrichment_source"] == "website+pattern"
    assert rows[1]["Email"] == "info@biz.io"
    assert rows[1]["email_type"] == "business"

    # Icypeas was asked with the scraped name
    assert http_session.post.call_args.kwargs["json"]["domainOrCompany"] == "acme.com"

    logs = list((temp_workdir / "logs").glob("enrichment-*.log"))
    assert len(logs) == 1
    entries = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert entries[0]["action"] == "resolve_columns"
    assert entries[-1]["action"] == "complete"
    assert {"find_email", "generate_pattern", "verify_email"} <= {e["action"] for e in entries}
    reset_logging()


def test_run_without_credentials_completes_with_errors(write_config, temp_workdir: Path, capsys):
    reset_logging()
    src = temp_workdir / "data" / "leads.csv"
    src.write_text("Email\njane@biz.io\n", encoding="utf-8")
    out_csv = temp_workdir / "out.csv"

    code = cli_main(["run", str(src), "-o", str(out_csv)])

    out = capsys.readouterr().out
    assert code == 2
    assert "MillionVerifier API key not configured" in out
    assert "errors=1" in out
    with out_csv.open(encoding="utf-8", newline="") as f:
        assert list(csv.DictReader(f))[0]["Email"] == "jane@biz.io"
    reset_logging()
