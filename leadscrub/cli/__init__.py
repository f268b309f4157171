"""Command line interface (`python -m leadscrub.cli`, console script `leadscrub`)."""
