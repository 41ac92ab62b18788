"""Slack event normalization and dispatch middleware for chat bots."""

__version__ = "0.1.0"
