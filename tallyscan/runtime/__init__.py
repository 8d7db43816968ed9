"""Runtime infrastructure for tallyscan.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Assistant settings via load_assistant_settings()
- Assistant collaborators via build_assistants()

Usage:
    from tallyscan.runtime import get_logger, load_assistant_settings

    logger = get_logger(__name__)
    settings = load_assistant_settings()
"""

from tallyscan.runtime.assistants import (
    AssistantResponseError,
    AssistantUnavailable,
    CloudAssistant,
    LocalModelAssistant,
    OnDeviceAssistant,
    OpenAIChatAssistant,
    build_assistants,
)
from tallyscan.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    reset_logging,
    set_log_level,
)
from tallyscan.runtime.settings import AssistantSettings, load_assistant_settings

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "reset_logging",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Settings
    "AssistantSettings",
    "load_assistant_settings",
    # Assistants
    "AssistantResponseError",
    "AssistantUnavailable",
    "CloudAssistant",
    "LocalModelAssistant",
    "OnDeviceAssistant",
    "OpenAIChatAssistant",
    "build_assistants",
]
