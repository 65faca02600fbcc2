"""
FastAPI application factory.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from vetshop.api.middleware import AdminAccessMiddleware, setup_cors, setup_security_headers
from vetshop.api.observability import ObservabilityMiddleware, generate_request_id, get_request_id
from vetshop.api.routes import appointments as appointments_routes
from vetshop.api.routes import auth as auth_routes
from vetshop.api.routes import catalog as catalog_routes
from vetshop.api.routes import dashboard as dashboard_routes
from vetshop.api.routes import orders as orders_routes
from vetshop.api.state import AppState, build_state
from vetshop.config import Settings, get_settings
from vetshop.exceptions import VetShopError, exception_to_http_status


def create_app(
    *,
    settings: Settings | None = None,
    state: AppState | None = None,
) -> FastAPI:
    cfg = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "state", None) is None:
            app.state.state = build_state(cfg)
        yield

    app = FastAPI(
        title="VetShop API",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    if state is not None:
        app.state.state = state

    setup_cors(app, cfg)
    setup_security_headers(app)
    app.add_middleware(AdminAccessMiddleware, settings=cfg)

    # Observability middleware (must be added last to wrap all others)
    app.add_middleware(ObservabilityMiddleware)

    @app.get("/v1/health")
    def health(response: Response) -> dict:
        response.headers["Cache-Control"] = "no-store"
        return {"ok": True}

    app.include_router(orders_routes.router)
    app.include_router(catalog_routes.router)
    app.include_router(appointments_routes.router)
    app.include_router(auth_routes.router)
    app.include_router(dashboard_routes.router)

    def _error_headers(request: Request) -> dict[str, str]:
        # Clients always get a request id for correlation, even on errors.
        rid = request.headers.get("x-request-id") or get_request_id() or generate_request_id()
        return {"X-Request-ID": rid, "Cache-Control": "no-store"}

    @app.exception_handler(VetShopError)
    def _vetshop_error(request: Request, exc: VetShopError) -> JSONResponse:
        headers = _error_headers(request)
        exc.request_id = headers["X-Request-ID"]
        return JSONResponse(status_code=exception_to_http_status(exc), content=exc.to_dict(), headers=headers)

    @app.exception_handler(Exception)
    def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        # ObservabilityMiddleware logs the exception; the envelope stays stable.
        _ = exc
        return JSONResponse(status_code=500, content={"error": "internal_error"}, headers=_error_headers(request))

    return app


app = create_app()
