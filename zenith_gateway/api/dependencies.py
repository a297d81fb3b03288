"""Dependency injection for FastAPI endpoints"""

from fastapi import Header, Request
from zenith_gateway.config import settings
from zenith_gateway.domain.clock import Clock, SystemClock
from zenith_gateway.infrastructure.clients.ledger import LedgerClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_owner_id(x_owner_id: str = Header(..., min_length=1, description="Tenant (owner) identifier")) -> str:
    """Tenant scope for every read and write"""
    return x_owner_id


def get_clock() -> Clock:
    """Provide the business clock used for 'today'"""
    return SystemClock(settings.timezone)


def get_ledger_client() -> LedgerClient:
    """Provide Ledger webhook client instance"""
    return LedgerClient()
