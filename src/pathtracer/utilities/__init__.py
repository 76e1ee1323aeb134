"""Utilities shared by the renderer and its scripts."""

from .logconfig import PACKAGE_LOGGER, setup_logging

__all__ = ["PACKAGE_LOGGER", "setup_logging"]
