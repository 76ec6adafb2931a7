from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from transporte.core.config import Settings, settings as default_settings
from transporte.core.errors import install_error_handlers
from transporte.db import session as db_session
from transporte.routes import acertos as acertos_routes
from transporte.routes import auth as auth_routes
from transporte.routes import despesas as despesas_routes
from transporte.routes import health
from transporte.routes import motoristas as motoristas_routes
from transporte.routes import receitas as receitas_routes
from transporte.routes import transportadoras as transportadoras_routes
from transporte.routes import viagens as viagens_routes
from sqlalchemy.engine import Engine
from typing import Optional
import logging
import threading
from collections import defaultdict
import time


def _install_request_logging(app: FastAPI, settings: Settings) -> None:
    # Use a dedicated app logger to avoid uvicorn.access formatter expectations
    req_logger = logging.getLogger("transporte.request")
    req_logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))

    # In-memory request counters per route (method + path), guarded by a lock
    request_counts = defaultdict(int)
    lock = threading.Lock()
    totals = {"global": 0}
    prefixes = [p.strip() for p in (settings.REQUEST_LOG_INCLUDE_PREFIXES or "").split(",") if p.strip()]
    every_n = max(1, settings.REQUEST_LOG_EVERY_N)

    @app.middleware("http")
    async def request_count_middleware(request: Request, call_next):
        # the SQLAlchemy listener increments this during the request
        db_counter = [0]
        db_count_token = db_session.request_db_query_count.set(db_counter)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            db_session.request_db_query_count.reset(db_count_token)
        duration_ms = int((time.perf_counter() - start) * 1000)

        # the matched route template is only known once routing has run
        route = request.scope.get("route")
        key_path = getattr(route, "path", None) or request.url.path
        key = f"{request.method} {key_path}"
        with lock:
            request_counts[key] += 1
            count_val = request_counts[key]
            totals["global"] += 1
            global_count_val = totals["global"]

        # Log every N hits to avoid spam
        if count_val % every_n == 0:
            req_logger.info(f"Request count threshold reached: {key} -> {count_val} (global={global_count_val})")

        if settings.REQUEST_LOG_VERBOSE and any(request.url.path.startswith(p) for p in prefixes):
            qs = request.url.query
            path_qs = f"{request.url.path}?{qs}" if qs else request.url.path
            req_logger.info(
                f"{request.method} {path_qs} -> {response.status_code} in {duration_ms}ms | route_count={count_val} global_count={global_count_val}"
            )
            req_logger.info(f"Foram {db_counter[0]} requisições ao banco nesta requisição.")
            req_logger.info(
                f"Total global de requisições ao banco desde o início: {db_session.get_global_db_queries_total()}."
            )
        return response


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Build the API. Tests pass their own settings and an in-memory engine."""
    settings = settings or default_settings
    engine = engine or db_session.build_engine(settings)

    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL, logging.INFO))

    app = FastAPI(
        title="API Gestão de Transportes",
        version="1.0.0",
        description="Transportadoras, motoristas, viagens e acertos",
        # Avoid automatic 307 redirects between /path and /path/
        # Both variants are registered on collection endpoints.
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = db_session.build_sessionmaker(engine)

    _install_request_logging(app, settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.include_router(health.router)
    app.include_router(auth_routes.router)
    app.include_router(transportadoras_routes.router)
    app.include_router(motoristas_routes.router)
    app.include_router(viagens_routes.router)
    app.include_router(receitas_routes.router)
    app.include_router(despesas_routes.router)
    app.include_router(acertos_routes.router)

    @app.on_event("startup")
    def on_startup():
        # create database tables if they don't exist
        db_session.create_db(engine)

    @app.on_event("shutdown")
    def on_shutdown():
        engine.dispose()

    return app


app = create_app()
