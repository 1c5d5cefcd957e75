"""Profiles, settings, scenes, device naming, audio mixer helpers and FFmpeg recording for a capture studio."""

__version__ = "0.1.0"