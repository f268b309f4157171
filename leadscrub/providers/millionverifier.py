from __future__ import annotations

import logging
import os

import requests

from leadscrub.constants import ROLE_ACCOUNT_PREFIXES
from leadscrub.providers.base import EmailVerification, VerificationStatus

"""
Email deliverability verification via the MillionVerifier API.
"""

__all__ = ["MillionVerifierClient", "classify_result", "is_role_account"]

logger = logging.getLogger(__name__)

MV_BASE_URL = "https://api.millionverifier.com/api/v3"
REQUEST_TIMEOUT_SECONDS = 30

_VALID_RESULTS = {"ok", "valid", "good"}
_INVALID_RESULTS = {"invalid", "bad", "error"}
_RISKY_RESULTS = {"risky", "catch_all", "disposable"}


def is_role_account(email: str) -> bool:
    """Local check: generic mailbox prefixes (info@, support@, ...)."""
    local_part = email.split("@")[0].strip().lower()
    return local_part in ROLE_ACCOUNT_PREFIXES


def classify_result(result: str) -> VerificationStatus:
    result = result.lower()
    if result in _VALID_RESULTS:
        return VerificationStatus.VALID
    if result in _INVALID_RESULTS:
        return VerificationStatus.INVALID
    if result in _RISKY_RESULTS:
        return VerificationStatus.RISKY
    return VerificationStatus.UNKNOWN


class MillionVerifierClient:
    """Classifies an email as valid / invalid / risky / unknown.

    The role-account flag is computed locally and returned even when the
    remote call fails or no API key is configured.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        session: requests.Session | None = None,
        base_url: str = MV_BASE_URL,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.environ.get("MILLIONVERIFIER_API_KEY", "")
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")

    def verify(self, email: str) -> EmailVerification:
        role = is_role_account(email)
        if not self.api_key:
            return EmailVerification(
                status=VerificationStatus.UNKNOWN,
                is_role_account=role,
                error="MillionVerifier API key not configured",
            )

        try:
            response = self.session.get(
                f"{self.base_url}/",
                params={"api": self.api_key, "email": email},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            logger.warning("millionverifier request failed email=%s error=%s", email, exc)
            return EmailVerification(
                status=VerificationStatus.UNKNOWN,
                is_role_account=role,
                error=str(exc) or "MillionVerifier request failed",
            )

        if not response.ok:
            return EmailVerification(
                status=VerificationStatus.UNKNOWN,
                is_role_account=role,
                error=f"MillionVerifier API error: {response.status_code}",
            )

        try:
            payload = response.json()
        except ValueError:
            return EmailVerification(
                status=VerificationStatus.UNKNOWN,
                is_role_account=role,
                error="MillionVerifier returned invalid JSON",
            )

        raw = ""
        if isinstance(payload, dict):
            raw = str(payload.get("result") or payload.get("quality") or "")
        return EmailVerification(status=classify_result(raw), is_role_account=role)
