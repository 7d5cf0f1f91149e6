"""Command line entry point and interactive window for tgrapher."""
