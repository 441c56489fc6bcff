"""Command line interface for contractcodec."""
