# onboarding/services/common/errors.py
"""
Service-layer exceptions.

These exceptions are raised by service methods and should be caught
at the API layer to return appropriate HTTP responses. Every rejected
mutation surfaces as one of these; nothing is silently clamped.
"""
from __future__ import annotations

from typing import Any, Optional


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    code = "service_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(ServiceError):
    """Raised when a requested resource does not exist."""

    code = "not_found"

    def __init__(
        self,
        resource_type: str,
        identifier: Any,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class ValidationError(ServiceError):
    """Raised when business logic validation fails."""

    code = "validation_error"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field


class AuthorizationError(ServiceError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"

    def __init__(
        self,
        message: str = "Authorization failed",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)


class ConflictError(ServiceError):
    """Raised when the state has already advanced past what a mutation assumes."""

    code = "conflict"

    def __init__(
        self,
        message: str,
        conflicting_field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.conflicting_field = conflicting_field


class ConcurrentModificationError(ConflictError):
    """Raised when a profile was changed by another request in between."""

    code = "concurrent_modification"

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        label = f"{resource_type} '{identifier}'" if identifier is not None else resource_type
        super().__init__(
            f"{label} was modified concurrently; reload and retry",
            details={"resource_type": resource_type},
        )


class InvalidStateError(ServiceError):
    """Raised when an operation is illegal from the current state."""

    code = "invalid_state"

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        if current_state is not None:
            details.setdefault("current_state", current_state)
        super().__init__(message, details)
        self.current_state = current_state


class CapacityExceededError(ServiceError):
    """Raised when a finite resource (a room bucket) is exhausted."""

    code = "capacity_exceeded"

    def __init__(self, gender: str, room_type: str) -> None:
        super().__init__(
            f"No rooms available for {gender}/{room_type}",
            details={"gender": gender, "room_type": room_type},
        )
        self.gender = gender
        self.room_type = room_type


class InvalidSignatureError(ServiceError):
    """Raised when a payment assertion fails the cryptographic check."""

    code = "invalid_signature"

    def __init__(self, message: str = "Payment signature verification failed") -> None:
        super().__init__(message)


class ExternalServiceError(ServiceError):
    """Raised when an external collaborator fails."""

    code = "external_service_error"

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(f"{service_name}: {message}", details)
        self.service_name = service_name


class ClassifierError(ExternalServiceError):
    """Raised when the document classifier cannot produce a usable result."""

    code = "classifier_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__("document-classifier", message, details)


class PaymentGatewayError(ExternalServiceError):
    """Raised when the payment gateway rejects or fails a request."""

    code = "payment_gateway_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__("payment-gateway", message, details)
