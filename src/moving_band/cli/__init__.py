"""Command line entry points for moving-band."""
