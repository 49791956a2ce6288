"""Client-side discovery, matching and safety layer for the creator platform API."""

from .api_client import ApiSession, create_http_client
from .core.config import Settings, get_settings
from .services.connection_presenter import ConnectionModal, build_presentation
from .services.discovery_service import SwipeStackController
from .services.exceptions import (
    ApiError,
    FanswipeError,
    RemoteFailureError,
    SafetyValidationError,
    StorageError,
    UnauthorizedError,
)
from .services.safety_manager import SafetyManager
from .services.storage import JsonFileStore, MemoryStore, RedisStore, create_store

__all__ = [
    "ApiError",
    "ApiSession",
    "ConnectionModal",
    "FanswipeError",
    "JsonFileStore",
    "MemoryStore",
    "RedisStore",
    "RemoteFailureError",
    "SafetyManager",
    "SafetyValidationError",
    "Settings",
    "StorageError",
    "SwipeStackController",
    "UnauthorizedError",
    "build_presentation",
    "create_http_client",
    "create_store",
    "get_settings",
]
