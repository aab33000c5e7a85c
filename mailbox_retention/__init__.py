"""Mailbox retention scanner."""

__version__ = "1.0.0"
