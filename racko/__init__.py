"""Racko rules engine, AI opponent and snapshot relay."""

__version__ = "1.1.0"
