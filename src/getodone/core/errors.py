# src/getodone/core/errors.py

from __future__ import annotations


class GetodoneError(Exception):
    """Base class for errors surfaced to the user."""


class ConfigurationMissing(GetodoneError):
    def __init__(self, message: str = "Please configure your AI API key and model in settings first.") -> None:
        super().__init__(message)


class NoPendingTasks(GetodoneError):
    def __init__(self, message: str = "Add some tasks first to get a meaningful motivation message.") -> None:
        super().__init__(message)


class GenerationError(GetodoneError):
    """Text generation failed. Never retried by the generator itself."""


class GenerationUnreachable(GenerationError):
    def __init__(self, message: str = "Failed to reach the text-generation service.") -> None:
        super().__init__(message)


class GenerationRejected(GenerationError):
    """The backend answered with a non-success status."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SchedulingFailure(GetodoneError):
    """The scheduler backend refused to register a trigger or schedule a notification."""
