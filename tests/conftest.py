"""
Pytest configuration and shared fixtures for vetshop tests.

Everything stays offline: the auth service and the repositories are replaced
by in-memory fakes with the same call signatures.
"""

import os
import sys
from pathlib import Path
from typing import Dict
from unittest import mock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from vetshop.api.state import AppState  # noqa: E402
from vetshop.config import Settings  # noqa: E402
from vetshop.domain import Appointment, CatalogEntry, Session, StoreProduct  # noqa: E402
from tests.fakes import (  # noqa: E402
    ADMIN_ID,
    ADMIN_TOKEN,
    CUSTOMER_ID,
    CUSTOMER_TOKEN,
    NO_PROFILE_ID,
    NO_PROFILE_TOKEN,
    ORDER_O1,
    ORDER_O2,
    OTHER_ID,
    PADDED_ADMIN_TOKEN,
    FakeAppointmentRepo,
    FakeAuthClient,
    FakeCatalogRepo,
    FakeOrderRepo,
    FakeOwnerRepo,
    make_session,
    order_record,
)


@pytest.fixture
def settings() -> Settings:
    with mock.patch.dict(os.environ, {}, clear=True):
        return Settings()


@pytest.fixture
def sessions() -> Dict[str, Session]:
    return {
        CUSTOMER_TOKEN: make_session(CUSTOMER_ID, CUSTOMER_TOKEN, "cliente@example.com"),
        ADMIN_TOKEN: make_session(ADMIN_ID, ADMIN_TOKEN, "admin@example.com"),
        PADDED_ADMIN_TOKEN: make_session(OTHER_ID, PADDED_ADMIN_TOKEN),
        NO_PROFILE_TOKEN: make_session(NO_PROFILE_ID, NO_PROFILE_TOKEN),
    }


@pytest.fixture
def auth_client(sessions) -> FakeAuthClient:
    return FakeAuthClient(sessions)


@pytest.fixture
def owner_repo() -> FakeOwnerRepo:
    return FakeOwnerRepo({CUSTOMER_ID: "cliente", ADMIN_ID: "administrador", OTHER_ID: " Administrador "})


@pytest.fixture
def order_repo() -> FakeOrderRepo:
    return FakeOrderRepo(
        {
            ORDER_O1: {"owner": CUSTOMER_ID, "record": order_record(ORDER_O1)},
            ORDER_O2: {"owner": OTHER_ID, "record": order_record(ORDER_O2, total=99.0,
                                                                 created_at="2024-06-01T10:00:00+00:00")},
        }
    )


@pytest.fixture
def store_products() -> list[StoreProduct]:
    host = "https://rjkuylsjihqnfsodhmgq.supabase.co/storage/v1/object/public/productos"
    return [
        StoreProduct.from_row({"id": "v1", "producto_padre_id": "p1", "nombre": "Pienso Adulto - 3kg",
                               "precio_venta": 20, "porcentaje_impuesto": 7,
                               "imagen_producto_principal": f"{host}/pienso.png", "stock_total": 5}),
        StoreProduct.from_row({"id": "v2", "producto_padre_id": "p1", "nombre": "Pienso Adulto - 12kg",
                               "precio_venta": 60, "porcentaje_impuesto": 7,
                               "imagen_producto_principal": f"{host}/pienso.png", "stock_total": 2}),
        StoreProduct.from_row({"id": "v3", "producto_padre_id": "p2", "nombre": "Collar Antiparasitario",
                               "precio_venta": 15, "porcentaje_impuesto": 0,
                               "imagen_producto_principal": "https://evil.example.com/collar.png",
                               "stock_total": 0}),
        StoreProduct.from_row({"id": "v4", "producto_padre_id": "p3", "nombre": "Pelota de goma",
                               "precio_venta": None, "porcentaje_impuesto": 7,
                               "imagen_producto_principal": None, "stock_total": None}),
    ]


@pytest.fixture
def catalog_repo(store_products) -> FakeCatalogRepo:
    entry = CatalogEntry(
        id="p1",
        nombre="Pienso Adulto",
        descripcion="Pienso completo para perros adultos.",
        porcentaje_impuesto=7,
        imagenes=[
            "https://rjkuylsjihqnfsodhmgq.supabase.co/storage/v1/object/public/productos/pienso.png",
            "http://rjkuylsjihqnfsodhmgq.supabase.co/insecure.png",
        ],
        variantes=store_products[:2],
    )
    return FakeCatalogRepo(store_products, {"p1": entry})


@pytest.fixture
def appointment_repo() -> FakeAppointmentRepo:
    return FakeAppointmentRepo(
        {
            CUSTOMER_ID: [
                Appointment(id="c2", fecha_hora_inicio="2024-07-02T09:30:00+00:00", motivo="Vacunación",
                            estado="confirmada", paciente_id="pet-1", paciente_nombre="Luna"),
                Appointment(id="c1", fecha_hora_inicio="2024-03-10T17:00:00+00:00", motivo=None,
                            estado="completada", paciente_id="pet-2",
                            paciente_nombre="Mascota no especificada"),
            ]
        }
    )


@pytest.fixture
def app_state(auth_client, order_repo, owner_repo, catalog_repo, appointment_repo) -> AppState:
    return AppState(
        auth_client=auth_client,
        order_repo=order_repo,
        owner_repo=owner_repo,
        catalog_repo=catalog_repo,
        appointment_repo=appointment_repo,
    )


@pytest.fixture
def client(app_state, settings):
    from fastapi.testclient import TestClient

    from vetshop.api import create_app

    app = create_app(settings=settings, state=app_state)
    return TestClient(app)
