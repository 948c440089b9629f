"""Command-line interface for chunkup."""
