from __future__ import annotations

from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from fleetfuel.api.errors import register_error_handlers
from fleetfuel.api.routes import budget, health, metrics, trips
from fleetfuel.application.services.budget_admin import BudgetAdminService
from fleetfuel.application.services.budget_reconciler import BudgetReconciler
from fleetfuel.core.audit import AuditLogger
from fleetfuel.core.logging import configure_logging, get_logger
from fleetfuel.core.settings import Settings, get_settings
from fleetfuel.domain.budget import BudgetPolicy
from fleetfuel.infrastructure.db import create_all, create_engine, create_session_factory
from fleetfuel.infrastructure.memory_store import InMemoryProfileStore, InMemoryTripStore
from fleetfuel.infrastructure.repositories.profiles import SqlAlchemyProfileStore
from fleetfuel.infrastructure.repositories.trips import SqlAlchemyTripStore


logger = get_logger(__name__)


def build_policy(settings: Settings) -> BudgetPolicy:
    return BudgetPolicy(
        monitor_threshold_percent=settings.monitor_threshold_percent,
        critical_threshold_percent=settings.critical_threshold_percent,
        pre_action_warn_ratio=settings.pre_action_warn_ratio,
        currency_symbol=settings.currency_symbol,
        timezone=settings.budget_timezone,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build stores and services for this process and tear them down on exit."""

        configure_logging(json=settings.environment != "dev")

        if settings.sentry_dsn:
            sentry_sdk.init(dsn=settings.sentry_dsn, traces_sample_rate=0.1)

        engine = None
        if settings.database_url == "memory://":
            profile_store = InMemoryProfileStore()
            trip_store = InMemoryTripStore()
            app.state.session_factory = None
        else:
            engine = create_engine(settings.database_url)
            session_factory = create_session_factory(engine)
            if settings.database_url.startswith("sqlite"):
                await create_all(engine)
            profile_store = SqlAlchemyProfileStore(session_factory, audit=AuditLogger(session_factory))
            trip_store = SqlAlchemyTripStore(session_factory)
            app.state.session_factory = session_factory

        app.state.profile_store = profile_store
        app.state.trip_store = trip_store
        app.state.budget_reconciler = BudgetReconciler(
            profiles=profile_store,
            trips=trip_store,
            policy=build_policy(settings),
        )
        app.state.budget_admin = BudgetAdminService(
            profile_store,
            max_budget=settings.max_budget,
            currency_symbol=settings.currency_symbol,
        )
        logger.info(f"{settings.app_name} started ({settings.environment})")

        yield

        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Incoming {request.method} request to {request.url.path}")
        response = await call_next(request)
        logger.info(f"Response status: {response.status_code}")
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app, settings)

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.api_version,
            "status": "online",
        }

    app.include_router(health.router, prefix="/internal")
    app.include_router(metrics.router, prefix="/internal")
    app.include_router(budget.router)
    app.include_router(trips.router)

    return app


app = create_app()
