"""Authoring engine for a wallpaper media library."""

__version__ = "0.3.0"
