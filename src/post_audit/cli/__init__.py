"""Command-line interface for Post Audit."""
