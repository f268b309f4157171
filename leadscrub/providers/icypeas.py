from __future__ import annotations

import logging
import os

import requests

from leadscrub.providers.base import EmailLookup

"""
Email discovery via the Icypeas email-search API.
"""

__all__ = ["IcypeasEmailFinder"]

logger = logging.getLogger(__name__)

ICYPEAS_BASE_URL = "https://app.icypeas.com/api"
REQUEST_TIMEOUT_SECONDS = 30


class IcypeasEmailFinder:
    """Looks up a person's email from first name, last name and domain."""

    def __init__(
        self,
        api_key: str | None = None,
        api_secret: str | None = None,
        *,
        session: requests.Session | None = None,
        base_url: str = ICYPEAS_BASE_URL,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.environ.get("ICYPEAS_API_KEY", "")
        self.api_secret = api_secret if api_secret is not None else os.environ.get("ICYPEAS_API_SECRET", "")
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")

    def find(self, first_name: str, last_name: str, domain: str) -> EmailLookup:
        if not self.api_key or not self.api_secret:
            return EmailLookup(error="Icypeas API credentials not configured")

        try:
            response = self.session.post(
                f"{self.base_url}/email-search",
                json={
                    "firstname": first_name,
                    "lastname": last_name,
                    "domainOrCompany": domain,
                },
                auth=(self.api_key, self.api_secret),
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            logger.warning("icypeas request failed domain=%s error=%s", domain, exc)
            return EmailLookup(error=str(exc) or "Icypeas request failed")

        if not response.ok:
            return EmailLookup(error=f"Icypeas API error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            return EmailLookup(error="Icypeas returned invalid JSON")

        if isinstance(payload, dict):
            if payload.get("email"):
                return EmailLookup(email=str(payload["email"]))
            # results sometimes come back as a list
            emails = payload.get("emails") or []
            if isinstance(emails, list) and emails:
                return EmailLookup(email=str(emails[0]))

        # a miss is not an error: the caller falls back to pattern guessing
        return EmailLookup()
