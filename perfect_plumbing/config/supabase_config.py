"""
Supabase Configuration

Resolves the hosted backend credentials. The table definitions live in
``sql/schema.sql``.
"""

from typing import Dict, Optional

from .settings import Settings, get_settings
from ..exceptions import ConfigurationError


def get_supabase_config(settings: Optional[Settings] = None) -> Dict[str, str]:
    """Get Supabase configuration, failing fast when a credential is missing"""
    settings = settings or get_settings()

    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_ANON_KEY environment variables are required")

    return {
        "url": settings.SUPABASE_URL,
        "anon_key": settings.SUPABASE_ANON_KEY,
    }
