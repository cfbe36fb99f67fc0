"""
Centralized access to all database models.

    from config_service.models import Application, Configuration
"""

from .application import Application
from .configuration import Configuration, DEFAULT_CONFIG_DATA

__all__ = [
    "Application",
    "Configuration",
    "DEFAULT_CONFIG_DATA",
]
