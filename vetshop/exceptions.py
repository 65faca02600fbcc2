"""
Centralized exception hierarchy for VetShop.

Every error raised by the service layer derives from ``VetShopError`` so the
API can turn it into a stable JSON envelope with a matching status code.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

logger = logging.getLogger(__name__)


# =============================================================================
# Base Exception
# =============================================================================


class VetShopError(RuntimeError):
    """
    Base exception for all VetShop errors.

    Attributes:
        message: Human-readable error message (safe to show to end users).
        detail: Additional error details, for logs only.
        error_code: Machine-readable error code.
        request_id: Unique identifier for the request (optional).
    """

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        error_code: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.error_code = error_code or self._default_error_code()
        self.request_id = request_id or self._generate_request_id()

    def _default_error_code(self) -> str:
        """Generate default error code from class name."""
        return f"vetshop_{self.__class__.__name__.lower()}"

    def _generate_request_id(self) -> str:
        return str(uuid.uuid4())

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format.

        ``detail`` is deliberately left out: it may carry backend error text.
        """
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.request_id:
            result["request_id"] = self.request_id
        return result

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message

    def log(self, level: int = logging.ERROR) -> None:
        """Log the exception with structured data."""
        logger.log(
            level,
            self.message,
            extra={
                "error_code": self.error_code,
                "detail": self.detail,
                "request_id": self.request_id,
                "exception_type": self.__class__.__name__,
            },
        )


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationRequiredError(VetShopError):
    """
    Raised when an operation needs a session and none is present.

    HTTP Status: 401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Usuario no autenticado",
        *,
        request_id: str | None = None,
    ) -> None:
        super().__init__(
            message,
            error_code="authentication_required",
            request_id=request_id,
        )


class InvalidCredentialsError(AuthenticationRequiredError):
    """Raised when sign-in is rejected by the auth backend."""

    def __init__(self, *, request_id: str | None = None) -> None:
        super().__init__("Credenciales incorrectas", request_id=request_id)
        self.error_code = "invalid_credentials"


# =============================================================================
# Not Found Errors
# =============================================================================


class NotFoundError(VetShopError):
    """
    Raised when a requested resource is not found.

    HTTP Status: 404 Not Found
    """

    def __init__(
        self,
        message: str = "Resource not found",
        *,
        resource_type: str | None = None,
        resource_id: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        detail = None
        if resource_type and resource_id:
            detail = f"{resource_type} '{resource_id}' not found"
        super().__init__(
            message,
            detail=detail,
            error_code="not_found",
            request_id=request_id,
        )


class OrderNotFoundError(NotFoundError):
    """
    Raised when an order does not exist or belongs to another customer.

    Both cases share one message so callers cannot enumerate foreign order ids.
    """

    def __init__(
        self,
        order_id: str,
        *,
        request_id: str | None = None,
    ) -> None:
        super().__init__(
            "Pedido no encontrado o no tienes permiso para verlo.",
            resource_type="order",
            resource_id=order_id,
            request_id=request_id,
        )
        self.order_id = order_id


class ProductNotFoundError(NotFoundError):
    """Raised when a store product doesn't exist or is not on sale."""

    def __init__(
        self,
        product_id: str,
        *,
        request_id: str | None = None,
    ) -> None:
        super().__init__(
            "Producto no encontrado",
            resource_type="product",
            resource_id=product_id,
            request_id=request_id,
        )
        self.product_id = product_id


# =============================================================================
# External API Errors
# =============================================================================


class ExternalAPIError(VetShopError):
    """
    Raised when an external API call fails.

    HTTP Status: 502 Bad Gateway
    """

    def __init__(
        self,
        service: str,
        *,
        message: str | None = None,
        status_code: int | None = None,
        request_id: str | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        detail = f"Status code: {status_code}" if status_code else None
        super().__init__(
            message or f"{service} request failed",
            detail=detail,
            error_code="external_api_error",
            request_id=request_id,
        )


class AuthServiceError(ExternalAPIError):
    """Raised when the hosted auth service is unreachable or misbehaves."""

    def __init__(
        self,
        message: str = "Auth service request failed",
        *,
        status_code: int | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__("auth", message=message, status_code=status_code, request_id=request_id)


class EmailDeliveryError(ExternalAPIError):
    """Raised when the email provider rejects a message."""

    def __init__(
        self,
        reason: str,
        *,
        status_code: int | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__("resend", message="Email delivery failed", status_code=status_code, request_id=request_id)
        self.reason = reason
        self.detail = reason


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(VetShopError):
    """
    Raised when configuration is invalid or missing.

    HTTP Status: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str,
        *,
        setting_name: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.setting_name = setting_name
        detail = f"Setting: {setting_name}" if setting_name else None
        super().__init__(
            message,
            detail=detail,
            error_code="configuration_error",
            request_id=request_id,
        )


# =============================================================================
# Data Store Errors
# =============================================================================


class DataStoreError(VetShopError):
    """
    Raised when a backend read fails.

    HTTP Status: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        detail: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.operation = operation
        detail_parts = []
        if operation:
            detail_parts.append(f"Operation: {operation}")
        if detail:
            detail_parts.append(detail)
        super().__init__(
            message,
            detail="; ".join(detail_parts) if detail_parts else None,
            error_code="data_store_error",
            request_id=request_id,
        )


class DatabaseError(DataStoreError):
    """Raised when a database query fails."""

    def __init__(
        self,
        message: str = "Database operation failed",
        *,
        operation: str | None = None,
        table: str | None = None,
        cause: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.table = table
        detail_parts = []
        if table:
            detail_parts.append(f"Table: {table}")
        if cause:
            detail_parts.append(f"Cause: {cause}")
        super().__init__(
            message,
            operation=operation,
            detail="; ".join(detail_parts) if detail_parts else None,
            request_id=request_id,
        )


class ProfileLookupError(DatabaseError):
    """Raised when an owner's profile row cannot be read (missing or query failure)."""

    def __init__(
        self,
        user_id: str,
        *,
        cause: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(
            "Error al obtener el perfil",
            operation="get_role",
            table="propietarios",
            cause=cause,
            request_id=request_id,
        )
        self.user_id = user_id


# =============================================================================
# HTTP Exception Helpers
# =============================================================================


def exception_to_http_status(exc: VetShopError) -> int:
    """
    Map exception to appropriate HTTP status code.

    Args:
        exc: The exception to map.

    Returns:
        HTTP status code.
    """
    status_map = {
        InvalidCredentialsError: 401,
        AuthenticationRequiredError: 401,
        NotFoundError: 404,
        EmailDeliveryError: 502,
        AuthServiceError: 502,
        ExternalAPIError: 502,
        ConfigurationError: 500,
        DataStoreError: 500,
    }

    for exc_class, status in status_map.items():
        if isinstance(exc, exc_class):
            return status
    return 500

