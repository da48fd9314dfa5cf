import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.db.engine import Database
from app.api.errors import register_exception_handlers
from app.api.routers.categories import router as categories_router
from app.api.routers.customers import router as customers_router
from app.api.routers.technicians import router as technicians_router
from app.api.routers.tickets import router as tickets_router
from app.mcp.server import build_mcp

logger = logging.getLogger("helpdesk")

API_PREFIX = os.getenv("API_PREFIX", "")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def create_app(database: Database | None = None) -> FastAPI:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    database = database or Database()
    mcp = build_mcp(database)
    # Builds the MCP session manager, which the lifespan runs
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        database.open()

        # MCP session manager
        async with mcp.session_manager.run():
            try:
                yield
            finally:
                # Shutdown
                database.close()

    app = FastAPI(title="Helpdesk Ticketing", lifespan=lifespan)
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(tickets_router, prefix=API_PREFIX)
    app.include_router(customers_router, prefix=API_PREFIX)
    app.include_router(technicians_router, prefix=API_PREFIX)
    app.include_router(categories_router, prefix=API_PREFIX)

    @app.get(f"{API_PREFIX}/health", tags=["Health"])
    def health():
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    # MCP accessible on http://localhost:8000/mcp
    app.mount("/mcp", mcp_app)

    return app


app = create_app()
