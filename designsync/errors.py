"""Failure taxonomy shared by every pipeline stage."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes, one per failure class."""

    SUCCESS = 0
    INVALID_CONFIGURATION = 1
    REPOSITORY_ACCESS_FAILURE = 2
    KEY_VAULT_ACCESS_FAILURE = 3
    AUTHENTICATION_FAILURE = 4
    DESIGN_PLATFORM_API_FAILURE = 5
    TOKEN_EXTRACTION_FAILURE = 6
    PLATFORM_GENERATION_FAILURE = 7
    CUSTOM_SECTION_CONFLICT = 8
    GIT_OPERATION_FAILURE = 9
    FILE_SYSTEM_ERROR = 10
    NO_DESIGN_CHANGES = 20


class DesignSyncError(RuntimeError):
    """Raised by a pipeline stage; carries the exit code for the run."""

    def __init__(self, exit_code: ExitCode, message: str) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(DesignSyncError):
    """Raised when configuration or a tag template is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(ExitCode.INVALID_CONFIGURATION, message)


class NormalizationError(DesignSyncError):
    """Raised when normalization leaves no usable tokens."""

    def __init__(self, message: str) -> None:
        super().__init__(ExitCode.TOKEN_EXTRACTION_FAILURE, message)


class GenerationError(DesignSyncError):
    """Raised when a platform generator cannot produce its artifacts."""

    def __init__(self, message: str) -> None:
        super().__init__(ExitCode.PLATFORM_GENERATION_FAILURE, message)


__all__ = [
    "ConfigError",
    "DesignSyncError",
    "ExitCode",
    "GenerationError",
    "NormalizationError",
]
