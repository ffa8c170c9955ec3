"""
Package: config
Description: Relay settings loaded from the environment.
"""

from .settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
