"""Cleanup, enrichment planning / pipeline and list orchestration."""
