"""cc-notes: attach Claude Code conversations to git commits as notes."""

__version__ = "0.1.0"
