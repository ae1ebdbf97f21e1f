"""Roadkill wiki API."""
