"""Loader configuration."""

from .manager import LoaderSettings, load_settings

__all__ = ["LoaderSettings", "load_settings"]
