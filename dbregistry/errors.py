# ==============================================
# Errors
# ==============================================
#
# PURPOSE:
#   One exception hierarchy for everything the registry can
#   refuse to do. Callers that don't care about the reason can
#   catch RegistryError.
#
# HIERARCHY:
# ----------
#   RegistryError
#   ├── ConfigError          (also ValueError)   invalid connection config
#   ├── DuplicateNameError                        name already registered
#   ├── ConnectionError      (also builtins.ConnectionError)  probe failed
#   │   └── PoolTimeoutError                      no free pooled connection
#   ├── NotFoundError        (also LookupError)   unknown connection name
#   └── MigrationError                            migration could not run
#
# ==============================================

import builtins


class RegistryError(Exception):
    """Base class for all registry errors."""


class ConfigError(RegistryError, ValueError):
    """Raised when a connection config fails validation."""

    def __init__(self, message: str, details: str = ""):
        self.details = details
        if details:
            message = f"{message}: {details}"
        super().__init__(message)


class DuplicateNameError(RegistryError):
    """Raised when provisioning a name that is registered or being provisioned."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Database connection already exists: "{name}"')


class ConnectionError(RegistryError, builtins.ConnectionError):
    """Raised when a database cannot be reached."""


class PoolTimeoutError(ConnectionError):
    """Raised when no pooled connection frees up in time."""


class NotFoundError(RegistryError, LookupError):
    """Raised when looking up a connection name that was never registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Database connection "{name}" not found')


class MigrationError(RegistryError):
    """Raised when migrations cannot be listed or applied."""
