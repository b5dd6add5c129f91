"""Rankwatch: League of Legends rank tracking and match notification service."""

__version__ = "0.1.0"
