"""FastAPI dependency injection providers.

The lifespan in main.py builds one TransactionService (and its store) per
application and parks it on ``app.state``; these providers hand it to route
handlers via Depends().
"""

from __future__ import annotations

from fastapi import Request

from property_settlement.config import Settings
from property_settlement.services.notary_service import NotaryAgentService
from property_settlement.services.transaction_service import TransactionService


def get_transaction_service(request: Request) -> TransactionService:
    """Provide the application's TransactionService."""
    return request.app.state.transaction_service


def get_notary_service(request: Request) -> NotaryAgentService:
    """Provide the AI notary agent bound to the same TransactionService."""
    return request.app.state.notary_service


def get_app_settings(request: Request) -> Settings:
    """Provide the settings the application was built with."""
    return request.app.state.settings
