"""
Configuration management for Hosby Python SDK

This module provides the validated client configuration and its loaders.
"""

from .client_config import (
    ClientConfig,
    ENV_PREFIX,
    load_config,
)

__all__ = [
    'ClientConfig',
    'ENV_PREFIX',
    'load_config',
]
