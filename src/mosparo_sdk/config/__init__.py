"""
Configuration management for mosparo Python SDK

This module provides the connection settings of a mosparo project and
loaders for JSON and environment based configuration.
"""

from .client_config import ClientConfig

__all__ = [
    'ClientConfig',
]
