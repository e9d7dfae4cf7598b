"""
Profiles module.

Supabase-backed profile store used by the session controller.
"""

from .repository import ProfileRepository

__all__ = ["ProfileRepository"]
