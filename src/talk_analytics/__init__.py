"""Engagement analytics over AI-assistant conversation histories."""

__version__ = "0.1.0"
