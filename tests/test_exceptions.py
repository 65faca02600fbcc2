"""
Tests for the exception hierarchy (vetshop.exceptions).
"""

import pytest

from vetshop.exceptions import (
    AuthenticationRequiredError,
    AuthServiceError,
    ConfigurationError,
    DatabaseError,
    EmailDeliveryError,
    InvalidCredentialsError,
    OrderNotFoundError,
    ProductNotFoundError,
    ProfileLookupError,
    VetShopError,
    exception_to_http_status,
)


class TestToDict:
    def test_detail_is_not_exposed(self):
        exc = DatabaseError(cause="relation pedidos does not exist", table="pedidos")
        body = exc.to_dict()
        assert body["error"] == "data_store_error"
        assert "detail" not in body
        assert "pedidos" not in body["message"]
        assert "relation pedidos" in str(exc)

    def test_default_error_code(self):
        assert VetShopError("x").error_code == "vetshop_vetshoperror"

    def test_order_not_found_message_is_opaque(self):
        exc = OrderNotFoundError("o2")
        assert exc.message == "Pedido no encontrado o no tienes permiso para verlo."
        assert exc.order_id == "o2"
        assert "o2" not in exc.to_dict()["message"]

    def test_invalid_credentials(self):
        exc = InvalidCredentialsError()
        assert exc.error_code == "invalid_credentials"
        assert isinstance(exc, AuthenticationRequiredError)


class TestHttpStatus:
    @pytest.mark.parametrize(
        ("exc", "status"),
        [
            (AuthenticationRequiredError(), 401),
            (InvalidCredentialsError(), 401),
            (OrderNotFoundError("o1"), 404),
            (ProductNotFoundError("p1"), 404),
            (AuthServiceError(), 502),
            (EmailDeliveryError("rejected"), 502),
            (ConfigurationError("missing key"), 500),
            (ProfileLookupError("u1"), 500),
            (VetShopError("boom"), 500),
        ],
    )
    def test_exception_to_http_status(self, exc, status):
        assert exception_to_http_status(exc) == status

