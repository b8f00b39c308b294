"""Lectern: a protected, remotely controlled player for embedded lesson videos."""

__version__ = "0.3.0"
