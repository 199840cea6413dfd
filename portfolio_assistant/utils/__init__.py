# Portfolio Assistant Utilities Package
"""
Shared utility functions and helpers for the assistant.
"""

from .helpers import identity_translate, load_settings

__all__ = ["identity_translate", "load_settings"]
