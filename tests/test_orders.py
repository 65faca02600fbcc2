"""
Tests for customer order lookups: the action and the HTTP routes.

Scenario: the customer owns O1; O2 belongs to someone else.
"""

from __future__ import annotations

import logging

import pytest

from vetshop.actions.orders import get_customer_order_by_id, list_customer_orders
from vetshop.exceptions import AuthenticationRequiredError, OrderNotFoundError
from tests.fakes import CUSTOMER_ID, CUSTOMER_TOKEN, ORDER_O1, ORDER_O2, FakeOrderRepo, make_session

CUSTOMER = make_session(CUSTOMER_ID, CUSTOMER_TOKEN)


class TestGetCustomerOrderById:
    def test_returns_owned_order_with_nested_items(self, order_repo):
        order = get_customer_order_by_id(ORDER_O1, CUSTOMER, order_repo)

        assert order["id"] == ORDER_O1
        item = order["items_pedido"][0]
        assert item["cantidad"] == 2
        assert item["producto_variantes"]["nombre"] == "Pienso Adulto - 3kg"
        assert item["producto_variantes"]["productos_catalogo"]["id"] == "product-1"

    def test_filters_on_order_id_and_session_user(self, order_repo):
        get_customer_order_by_id(ORDER_O1, CUSTOMER, order_repo)
        assert order_repo.calls == [("get_for_owner", ORDER_O1, CUSTOMER_ID)]

    def test_foreign_order_is_not_found(self, order_repo):
        with pytest.raises(OrderNotFoundError) as exc_info:
            get_customer_order_by_id(ORDER_O2, CUSTOMER, order_repo)
        assert exc_info.value.message == "Pedido no encontrado o no tienes permiso para verlo."

    def test_unknown_order_has_the_same_error(self, order_repo):
        with pytest.raises(OrderNotFoundError) as exc_info:
            get_customer_order_by_id("does-not-exist", CUSTOMER, order_repo)
        assert exc_info.value.message == "Pedido no encontrado o no tienes permiso para verlo."

    def test_query_error_is_reported_as_not_found(self, order_repo, caplog):
        order_repo.fail = True
        with caplog.at_level(logging.WARNING):
            with pytest.raises(OrderNotFoundError) as exc_info:
                get_customer_order_by_id(ORDER_O1, CUSTOMER, order_repo)

        assert "relation does not exist" not in exc_info.value.message
        denied = [r for r in caplog.records if r.getMessage() == "order_lookup_denied"]
        assert denied and denied[-1].reason == "query_error"

    def test_no_match_reason_is_logged(self, order_repo, caplog):
        with caplog.at_level(logging.WARNING):
            with pytest.raises(OrderNotFoundError):
                get_customer_order_by_id(ORDER_O2, CUSTOMER, order_repo)
        denied = [r for r in caplog.records if r.getMessage() == "order_lookup_denied"]
        assert denied and denied[-1].reason == "no_match"

    def test_no_session_is_rejected_before_any_read(self, order_repo):
        with pytest.raises(AuthenticationRequiredError) as exc_info:
            get_customer_order_by_id(ORDER_O1, None, order_repo)
        assert exc_info.value.message == "Usuario no autenticado"
        assert order_repo.calls == []


class TestListCustomerOrders:
    def test_only_own_orders(self, order_repo):
        orders = list_customer_orders(CUSTOMER, order_repo)
        assert [o.id for o in orders] == [ORDER_O1]

    def test_read_failure_yields_empty_history(self):
        assert list_customer_orders(CUSTOMER, FakeOrderRepo({}, fail=True)) == []

    def test_requires_session(self, order_repo):
        with pytest.raises(AuthenticationRequiredError):
            list_customer_orders(None, order_repo)


class TestOrderRoutes:
    def _auth(self):
        return {"Authorization": f"Bearer {CUSTOMER_TOKEN}"}

    def test_get_own_order(self, client):
        resp = client.get(f"/v1/orders/{ORDER_O1}", headers=self._auth())
        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == ORDER_O1
        assert body["items_pedido"][0]["producto_variantes"]["id"] == "variant-1"
        assert resp.headers["cache-control"] == "no-store"

    def test_foreign_order_is_404(self, client):
        resp = client.get(f"/v1/orders/{ORDER_O2}", headers=self._auth())
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "not_found"
        assert body["message"] == "Pedido no encontrado o no tienes permiso para verlo."
        assert "x-request-id" in resp.headers

    def test_anonymous_is_401(self, client):
        resp = client.get(f"/v1/orders/{ORDER_O1}")
        assert resp.status_code == 401
        assert resp.json()["error"] == "authentication_required"

    def test_list_orders(self, client):
        resp = client.get("/v1/orders", headers=self._auth())
        assert resp.status_code == 200
        items = resp.json()["items"]
        assert [i["id"] for i in items] == [ORDER_O1]
        assert items[0]["total_display"] == "45,50 €"
