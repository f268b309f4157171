"""Capability providers: text extraction, contact inference, email discovery, verification."""

from .base import (
    ContactInferrer,
    EmailFinder,
    EmailLookup,
    EmailVerification,
    EmailVerifier,
    ExtractedText,
    InferredContact,
    TextExtractor,
    VerificationStatus,
)
from .contact_inference import ClaudeContactInferrer
from .icypeas import IcypeasEmailFinder
from .millionverifier import MillionVerifierClient
from .scraper import WebsiteScraper

__all__ = [
    "ContactInferrer",
    "EmailFinder",
    "EmailLookup",
    "EmailVerification",
    "EmailVerifier",
    "ExtractedText",
    "InferredContact",
    "TextExtractor",
    "VerificationStatus",
    "ClaudeContactInferrer",
    "IcypeasEmailFinder",
    "MillionVerifierClient",
    "WebsiteScraper",
]
