from __future__ import annotations

import logging
import re
from urllib.parse import urljoin, urlsplit

import requests
from bs4 import BeautifulSoup

from leadscrub.providers.base import ExtractedText

"""
Website text extraction for contact discovery (requests + BeautifulSoup).
"""

__all__ = [
    "WebsiteScraper",
    "normalize_url",
    "html_to_text",
    "extract_sub_page_links",
]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_SUB_PAGES = 3
DEFAULT_MAX_TEXT_LENGTH = 8000
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; leadscrub/0.1)"

SUB_PAGE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (r"about", r"team", r"contact", r"staff", r"people", r"leadership", r"our-team", r"management")
]
STRIPPED_TAGS = ["script", "style", "nav", "footer", "header", "noscript", "iframe"]
_WHITESPACE = re.compile(r"\s+")


def normalize_url(url: str) -> str:
    normalized = url.strip()
    if not re.match(r"^https?://", normalized, flags=re.IGNORECASE):
        normalized = "https://" + normalized
    return normalized


def html_to_text(html: str) -> str:
    """Visible text of an HTML page with navigation chrome removed."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(STRIPPED_TAGS):
        tag.decompose()
    root = soup.body or soup
    return _WHITESPACE.sub(" ", root.get_text(" ")).strip()


def extract_sub_page_links(html: str, base_url: str, limit: int = DEFAULT_MAX_SUB_PAGES) -> list[str]:
    """Same-origin links whose path looks like an about/team/contact page."""
    soup = BeautifulSoup(html, "html.parser")
    base = urlsplit(base_url)
    links: list[str] = []
    seen: set[str] = set()

    for anchor in soup.find_all("a", href=True):
        try:
            resolved = urljoin(base_url, anchor["href"])
            parts = urlsplit(resolved)
        except ValueError:
            continue
        if (parts.scheme, parts.netloc) != (base.scheme, base.netloc):
            continue
        path = parts.path.lower()
        if resolved in seen or not any(p.search(path) for p in SUB_PAGE_PATTERNS):
            continue
        seen.add(resolved)
        links.append(resolved)

    return links[:limit]


class WebsiteScraper:
    """
    Fetches a homepage plus a few about/team/contact sub-pages and returns
    their concatenated visible text, truncated to a fixed length.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_sub_pages: int = DEFAULT_MAX_SUB_PAGES,
        max_text_length: int = DEFAULT_MAX_TEXT_LENGTH,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self.max_sub_pages = max_sub_pages
        self.max_text_length = max_text_length
        self.request_headers = {"User-Agent": user_agent}

    def fetch_page(self, url: str) -> str | None:
        try:
            response = self.session.get(url, headers=self.request_headers, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            logger.debug("fetch failed url=%s error=%s", url, exc)
            return None
        if not response.ok:
            logger.debug("fetch failed url=%s status=%s", url, response.status_code)
            return None
        content_type = response.headers.get("content-type", "")
        if "text/html" not in content_type:
            return None
        return response.text

    def extract(self, url: str) -> ExtractedText:
        normalized_url = normalize_url(url)

        homepage_html = self.fetch_page(normalized_url)
        if not homepage_html:
            return ExtractedText(text="", error=f"Failed to fetch {normalized_url}")

        texts = [html_to_text(homepage_html)]
        for link in extract_sub_page_links(homepage_html, normalized_url, limit=self.max_sub_pages):
            sub_html = self.fetch_page(link)
            if sub_html:
                texts.append(html_to_text(sub_html))

        combined = "\n\n".join(texts)
        return ExtractedText(text=combined[: self.max_text_length])
