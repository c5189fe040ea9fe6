"""FastAPI application factory for the Dispatch API.

Wires the routers, the error handlers, the maintenance gate and the health
check. Domain initialization is left to the caller.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dispatch.api.errors import register_error_handlers
from dispatch.api.routes import admin_router, driver_router, order_router, seller_router
from dispatch.config import get_settings
from dispatch.domain import dispatch
from dispatch.utils.logging import add_context, clear_context

HEALTH_PATH = "/health"


def create_app() -> FastAPI:
    app = FastAPI(
        title="Dispatch API",
        description="Marketplace order lifecycle and driver assignment",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the dispatch domain context, or refuse the request during maintenance."""
        if request.url.path == HEALTH_PATH:
            return await call_next(request)

        settings = get_settings()
        if settings.maintenance_mode:
            return JSONResponse(
                status_code=503,
                content={"error": "Maintenance", "message": settings.maintenance_message},
            )

        add_context(method=request.method, path=request.url.path)
        try:
            with dispatch.domain_context():
                response = await call_next(request)
        finally:
            clear_context()
        return response

    app.include_router(admin_router)
    app.include_router(order_router)
    app.include_router(seller_router)
    app.include_router(driver_router)
    register_error_handlers(app)

    @app.get(HEALTH_PATH)
    async def health():
        settings = get_settings()
        return JSONResponse(
            content={
                "status": "maintenance" if settings.maintenance_mode else "ok",
                "domain": dispatch.name,
            }
        )

    return app
