"""
Repository layer.

    from config_service.repositories import ApplicationRepository, ConfigurationRepository
"""

from .base_repository import BaseRepository
from .application_repository import ApplicationRepository
from .configuration_repository import ConfigurationRepository

__all__ = [
    "BaseRepository",
    "ApplicationRepository",
    "ConfigurationRepository",
]
