from typing import Optional


class MigrationError(RuntimeError):
    """Base class for every error raised by the migration tool."""


class ConfigError(MigrationError):
    pass


class SourceConnectionError(MigrationError):
    """The etcd cluster could not be reached."""


class SourceReadError(MigrationError):
    """Listing a namespace in etcd failed."""


class TransportError(MigrationError):
    """A request could not be built, sent, or its envelope decoded."""


class APIError(TransportError):
    """The remote API answered with an error status."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class TokenDerivationError(MigrationError):
    pass
