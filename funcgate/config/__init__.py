"""
Configuration module for centralized settings management.

Provides type-safe configuration using Pydantic with
environment variable support and validation.
"""

from .settings import (
    Settings,
    OpenApiSettings,
    ObservabilitySettings,
    load_settings
)

__all__ = [
    'Settings',
    'OpenApiSettings',
    'ObservabilitySettings',
    'load_settings'
]
