from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from leadscrub.providers.base import VerificationStatus
from leadscrub.providers.icypeas import IcypeasEmailFinder
from leadscrub.providers.millionverifier import MillionVerifierClient, classify_result, is_role_account


def _json_response(payload, status: int = 200):
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    resp.json.return_value = payload
    return resp


# --- icypeas ---------------------------------------------------------------


def test_finder_missing_credentials(monkeypatch):
    monkeypatch.delenv("ICYPEAS_API_KEY", raising=False)
    monkeypatch.delenv("ICYPEAS_API_SECRET", raising=False)
    session = MagicMock()
    lookup = IcypeasEmailFinder(session=session).find("Jane", "Doe", "acme.com")
    assert lookup.email is None
    assert lookup.error == "Icypeas API credentials not configured"
    session.post.assert_not_called()


def test_finder_sends_request_and_reads_email():
    session = MagicMock()
    session.post.return_value = _json_response({"email": "jane@acme.com"})
    finder = IcypeasEmailFinder("key", "secret", session=session)

    lookup = finder.find("Jane", "Doe", "acme.com")

    assert lookup.email == "jane@acme.com"
    assert lookup.error is None
    args, kwargs = session.post.call_args
    assert args[0] == "https://app.icypeas.com/api/email-search"
    assert kwargs["json"] == {"firstname": "Jane", "lastname": "Doe", "domainOrCompany": "acme.com"}
    assert kwargs["auth"] == ("key", "secret")


def test_finder_reads_email_list():
    session = MagicMock()
    session.post.return_value = _json_response({"emails": ["a@acme.com", "b@acme.com"]})
    assert IcypeasEmailFinder("k", "s", session=session).find("A", "B", "acme.com").email == "a@acme.com"


def test_finder_miss_is_not_an_error():
    session = MagicMock()
    session.post.return_value = _json_response({"status": "NOT_FOUND"})
    lookup = IcypeasEmailFinder("k", "s", session=session).find("A", "B", "acme.com")
    assert lookup.email is None
    assert lookup.error is None


def test_finder_http_error():
    session = MagicMock()
    session.post.return_value = _json_response({}, status=503)
    lookup = IcypeasEmailFinder("k", "s", session=session).find("A", "B", "acme.com")
    assert lookup.error == "Icypeas API error: 503"


def test_finder_transport_error():
    session = MagicMock()
    session.post.side_effect = requests.Timeout("timed out")
    lookup = IcypeasEmailFinder("k", "s", session=session).find("A", "B", "acme.com")
    assert lookup.email is None
    assert lookup.error == "timed out"


# --- millionverifier -------------------------------------------------------


@pytest.mark.parametrize(
    "raw,status",
    [("ok", "valid"), ("GOOD", "valid"), ("invalid", "invalid"), ("catch_all", "risky"),
     ("disposable", "risky"), ("unknown", "unknown"), ("", "unknown"), ("weird", "unknown")],
)
def test_classify_result(raw: str, status: str):
    assert classify_result(raw) is VerificationStatus(status)


def test_role_account_detection():
    assert is_role_account("info@acme.com")
    assert is_role_account("Sales@acme.com")
    assert not is_role_account("jane@acme.com")


def test_verifier_missing_key_still_reports_role(monkeypatch):
    monkeypatch.delenv("MILLIONVERIFIER_API_KEY", raising=False)
    session = MagicMock()
    result = MillionVerifierClient(session=session).verify("support@acme.com")
    assert result.status is VerificationStatus.UNKNOWN
    assert result.is_role_account is True
    assert result.error == "MillionVerifier API key not configured"
    session.get.assert_not_called()


def test_verifier_classifies_response():
    session = MagicMock()
    session.get.return_value = _json_response({"result": "ok", "quality": "good"})
    result = MillionVerifierClient("key", session=session).verify("jane@acme.com")
    assert result.status is VerificationStatus.VALID
    assert result.is_role_account is False
    assert result.error is None
    assert session.get.call_args.kwargs["params"] == {"api": "key", "email": "jane@acme.com"}


def test_verifier_http_error():
    session = MagicMock()
    session.get.return_value = _json_response({}, status=401)
    result = MillionVerifierClient("key", session=session).verify("jane@acme.com")
    assert result.status is VerificationStatus.UNKNOWN
    assert result.error == "MillionVerifier API error: 401"


def test_verifier_invalid_json():
    session = MagicMock()
    resp = _json_response(None)
    resp.json.side_effect = ValueError("no json")
    session.get.return_value = resp
    result = MillionVerifierClient("key", session=session).verify("jane@acme.com")
    assert result.error == "MillionVerifier returned invalid JSON"


def test_verifier_transport_error():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("refused")
    result = MillionVerifierClient("key", session=session).verify("info@acme.com")
    assert result.status is VerificationStatus.UNKNOWN
    assert result.is_role_account is True
    assert result.error == "refused"
