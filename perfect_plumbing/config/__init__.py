"""
Configuration and environment setup.

Settings are read from the environment and an optional ``.env`` file at the
repository root. See ``settings.Settings`` for the recognised variables.
"""

from .settings import Settings, get_settings
from .supabase_config import get_supabase_config

__all__ = [
    'Settings',
    'get_settings',
    'get_supabase_config',
]
