"""leadscrub: contact list cleanup and multi-stage enrichment."""

__version__ = "0.1.0"
