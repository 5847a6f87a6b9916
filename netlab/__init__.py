"""Networking exercises: routing tables, traffic shaping, ARQ and small socket services."""

__version__ = "0.1.0"