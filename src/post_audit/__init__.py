"""Post Audit - batch evaluation of archived social-media posts against an AI provider."""

__version__ = "0.1.0"
