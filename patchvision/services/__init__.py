"""
Service Layer

Service classes for the I/O around the editing engine.
"""

from patchvision.services.config_service import ConfigService
from patchvision.services.file_service import FileService

__all__ = [
    "ConfigService",
    "FileService",
]
