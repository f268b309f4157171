from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

"""Capability provider contracts used by enrichment.

Each provider is an external, network-bound service reduced to the narrow
shape enrichment needs. Providers never raise for expected failures
(missing credentials, transport errors, bad responses); they report them
through the `error` field of their result.
"""

__all__ = [
    "ExtractedText",
    "InferredContact",
    "EmailLookup",
    "VerificationStatus",
    "EmailVerification",
    "TextExtractor",
    "ContactInferrer",
    "EmailFinder",
    "EmailVerifier",
]


class VerificationStatus(Enum):
    VALID = "valid"
    INVALID = "invalid"
    RISKY = "risky"  # catch-all, disposable
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ExtractedText:
    text: str
    error: str | None = None


@dataclass(frozen=True)
class InferredContact:
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    confidence: float = 0.0
    error: str | None = None

    @property
    def identified(self) -> bool:
        return bool(self.first_name) and self.confidence > 0


@dataclass(frozen=True)
class EmailLookup:
    email: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class EmailVerification:
    status: VerificationStatus
    is_role_account: bool
    error: str | None = None


class TextExtractor(Protocol):
    def extract(self, url: str) -> ExtractedText: ...


class ContactInferrer(Protocol):
    def infer(self, text: str, context: dict[str, str]) -> InferredContact: ...


class EmailFinder(Protocol):
    def find(self, first_name: str, last_name: str, domain: str) -> EmailLookup: ...


class EmailVerifier(Protocol):
    def verify(self, email: str) -> EmailVerification: ...
