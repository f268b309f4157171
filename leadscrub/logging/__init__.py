"""Console logging setup and the enrichment audit log."""
