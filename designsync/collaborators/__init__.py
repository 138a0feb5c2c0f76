"""External system contracts and their default adapters."""

from .git import GitVersionControl
from .json_connector import JsonExportConnector
from .license import HttpLicenseClient, LicenseError, LicenseHeartbeat
from .protocols import (
    DesignPlatformConnector,
    LicenseClient,
    LicenseSession,
    SecretResolver,
    VersionControl,
)
from .secrets import EnvironmentSecretResolver

__all__ = [
    "DesignPlatformConnector",
    "EnvironmentSecretResolver",
    "GitVersionControl",
    "HttpLicenseClient",
    "JsonExportConnector",
    "LicenseClient",
    "LicenseError",
    "LicenseHeartbeat",
    "LicenseSession",
    "SecretResolver",
    "VersionControl",
]
