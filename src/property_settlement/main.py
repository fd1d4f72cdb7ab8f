"""FastAPI application entry point for the property settlement service.

Lifecycle:
    1. Startup: initialize logging, build the transaction store (memory or
       SQL), and wire the orchestrator and the AI notary agent.
    2. Running: serve the REST API under /api/v1/transactions.
    3. Shutdown: dispose of the database engine, if one was created.

Run with:
    uvicorn property_settlement.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from property_settlement import __version__
from property_settlement.config import Settings, get_settings
from property_settlement.infrastructure.memory_store import InMemoryTransactionStore
from property_settlement.logging_config import get_logger, setup_logging
from property_settlement.services.contract_service import TemplateContractGenerator
from property_settlement.services.notary_service import (
    MockDocumentScorer,
    NotaryAgentService,
)
from property_settlement.services.transaction_service import TransactionService

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(
            log_level=settings.app_log_level,
            json_logs=not settings.is_development,
        )
        logger = get_logger(__name__)
        logger.info("app.starting", env=settings.app_env, store=settings.store_backend)

        engine = None
        if settings.store_backend == "sql":
            from property_settlement.infrastructure.database.engine import (
                build_engine_from_settings,
                build_session_factory,
                init_db,
            )
            from property_settlement.infrastructure.database.repositories import (
                SqlTransactionStore,
            )

            engine = build_engine_from_settings(settings)
            await init_db(engine)
            store = SqlTransactionStore(build_session_factory(engine))
        else:
            store = InMemoryTransactionStore()

        transactions = TransactionService(
            store=store,
            contract_generator=TemplateContractGenerator(settings.contract_template_version),
        )
        app.state.settings = settings
        app.state.transaction_service = transactions
        app.state.notary_service = NotaryAgentService(
            transactions,
            scorer=MockDocumentScorer(),
            default_threshold=settings.notary_default_threshold,
        )
        logger.info("app.started", host=settings.app_host, port=settings.app_port)

        yield

        logger.info("app.shutting_down")
        if engine is not None:
            from property_settlement.infrastructure.database.engine import close_db

            await close_db(engine)
        logger.info("app.stopped")

    app = FastAPI(
        title="Property Settlement",
        description=(
            "Post-agreement orchestration of property sales: documents, "
            "escrowed payment and ownership transfer, with a full audit trail."
        ),
        version=__version__,
        lifespan=lifespan,
        debug=settings.app_debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # --- Middleware ---
    from property_settlement.api.middleware import setup_middleware

    setup_middleware(app, settings)

    # --- REST API Routes ---
    from property_settlement.api.routes.health import router as health_router
    from property_settlement.api.routes.transactions import router as transactions_router

    app.include_router(health_router)
    app.include_router(transactions_router)

    return app


# The app instance used by Uvicorn
app = create_app()
