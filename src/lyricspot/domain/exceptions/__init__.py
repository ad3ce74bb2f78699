"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing
    # str(exception). Don't raise this directly - use a subclass so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    # Yo, engines treat this as "item vanished mid-flight" - abort silently, no writes.
    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ExternalServiceError(DomainException):
    """External catalog (iTunes, MusicBrainz, LRCLIB) failed or timed out.

    Provider adapters absorb this and report "no match".
    """

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service


class DecodeError(DomainException):
    """A provider returned a payload we could not decode."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service} returned malformed payload: {message}")
        self.service = service


class PersistenceError(DomainException):
    """Writing back to the repository or lyrics store failed.

    Engines log it and carry on - the attempt timestamp was already stamped,
    so the cooldown still applies.
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration (e.g. lyrics directory not writable)."""

    pass


EntityNotFoundError = EntityNotFoundException


__all__ = [
    "ConfigurationError",
    "DecodeError",
    "DomainException",
    "EntityNotFoundError",
    "EntityNotFoundException",
    "ExternalServiceError",
    "PersistenceError",
]
