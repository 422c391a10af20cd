"""Twooter feed client: request bridge, content classifier and render tree."""

__version__ = "0.1.0"
