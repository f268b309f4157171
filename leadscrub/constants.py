from __future__ import annotations

import re

"""Process-wide constant sets and column role patterns.

Everything here is immutable and loaded once at import time; cleanup and
enrichment share the same sets (FREE_EMAIL_DOMAINS in particular must be the
same for email-type detection and the enrichment planner).
"""

__all__ = [
    "FREE_EMAIL_DOMAINS",
    "PRESERVE_ACRONYMS",
    "ROLE_ACCOUNT_PREFIXES",
    "NAME_COLUMN_PATTERNS",
    "FIRST_NAME_PATTERNS",
    "LAST_NAME_PATTERNS",
    "EMAIL_COLUMN_PATTERNS",
    "PHONE_COLUMN_PATTERNS",
    "WEBSITE_COLUMN_PATTERNS",
    "DOMAIN_COLUMN_PATTERNS",
    "DEFAULT_FIRST_NAME_COLUMN",
    "DEFAULT_LAST_NAME_COLUMN",
    "DEFAULT_EMAIL_COLUMN",
    "SPLIT_FIRST_NAME_COLUMN",
    "SPLIT_LAST_NAME_COLUMN",
    "EMAIL_TYPE_COLUMN",
    "TITLE_COLUMN",
    "ENRICHMENT_SOURCE_COLUMN",
]

FREE_EMAIL_DOMAINS: frozenset[str] = frozenset({
    "gmail.com",
    "yahoo.com",
    "hotmail.com",
    "outlook.com",
    "aol.com",
    "icloud.com",
    "mail.com",
    "protonmail.com",
    "zoho.com",
    "yandex.com",
    "gmx.com",
    "gmx.net",
    "live.com",
    "msn.com",
    "me.com",
    "mac.com",
    "inbox.com",
    "fastmail.com",
    "tutanota.com",
    "hushmail.com",
    "mailfence.com",
    "disroot.org",
    "riseup.net",
    "posteo.de",
    "runbox.com",
    "kolabnow.com",
    "proton.me",
    "pm.me",
    "yahoo.co.uk",
    "yahoo.co.in",
    "hotmail.co.uk",
})

# Canonical spelling of words kept as-is by capitalization fixing.
PRESERVE_ACRONYMS: frozenset[str] = frozenset({
    "LLC", "INC", "CEO", "CTO", "CFO", "COO", "VP", "SVP", "EVP", "MD",
    "PhD", "DDS", "DVM", "RN", "LPN", "PA", "NP", "II", "III", "IV",
    "JR", "SR", "USA", "UK", "NYC",
})

ROLE_ACCOUNT_PREFIXES: frozenset[str] = frozenset({
    "info",
    "support",
    "admin",
    "sales",
    "contact",
    "hello",
    "help",
    "office",
    "team",
    "billing",
    "accounts",
    "marketing",
    "enquiries",
    "inquiries",
    "service",
    "webmaster",
    "noreply",
    "no-reply",
    "hr",
    "jobs",
    "careers",
    "press",
    "media",
})


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


# Order matters: the first pattern list hit in column order wins.
NAME_COLUMN_PATTERNS = _compile(
    r"^name$",
    r"^full[_\s]?name$",
    r"^contact[_\s]?name$",
    r"^customer[_\s]?name$",
)
FIRST_NAME_PATTERNS = _compile(r"^first[_\s]?name$", r"^fname$")
LAST_NAME_PATTERNS = _compile(r"^last[_\s]?name$", r"^lname$", r"^surname$")
EMAIL_COLUMN_PATTERNS = _compile(
    r"^email$",
    r"^e[_\s]?mail$",
    r"^email[_\s]?address$",
)
PHONE_COLUMN_PATTERNS = _compile(
    r"^phone$",
    r"^phone[_\s]?number$",
    r"^tel$",
    r"^telephone$",
    r"^mobile$",
    r"^cell$",
)
WEBSITE_COLUMN_PATTERNS = _compile(
    r"^website$",
    r"^web[_\s]?site$",
    r"^website[_\s]?url$",
    r"^url$",
    r"^site$",
    r"^homepage$",
    r"^company[_\s]?website$",
)
DOMAIN_COLUMN_PATTERNS = _compile(
    r"^domain$",
    r"^company[_\s]?domain$",
    r"^email[_\s]?domain$",
    r"^website[_\s]?domain$",
)

DEFAULT_FIRST_NAME_COLUMN = "First Name"
DEFAULT_LAST_NAME_COLUMN = "Last Name"
DEFAULT_EMAIL_COLUMN = "email"
SPLIT_FIRST_NAME_COLUMN = "first_name"
SPLIT_LAST_NAME_COLUMN = "last_name"
EMAIL_TYPE_COLUMN = "email_type"
TITLE_COLUMN = "Title"
ENRICHMENT_SOURCE_COLUMN = "enrichment_source"
