"""Command line interface for release-engine."""
