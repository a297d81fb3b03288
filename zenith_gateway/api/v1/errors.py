"""Translation of domain errors into HTTP responses"""

import uuid
from fastapi import HTTPException
from zenith_gateway.domain.exceptions import (
    DomainException,
    ValidationError,
    InvalidStateError,
    OverpaymentError,
)


def parse_uuid(value: str, label: str) -> uuid.UUID:
    """Parse a path/query identifier or fail with 400"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID format")


def domain_http_error(exc: DomainException) -> HTTPException:
    """
    Map a business-rule rejection to a 4xx response.

    - ValidationError   → 400 validation_error (message list)
    - InvalidStateError → 409 invalid_state
    - OverpaymentError  → 422 overpayment
    """
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail={"code": "validation_error", "messages": exc.messages})
    if isinstance(exc, InvalidStateError):
        return HTTPException(status_code=409, detail={"code": "invalid_state", "messages": [str(exc)]})
    if isinstance(exc, OverpaymentError):
        return HTTPException(status_code=422, detail={"code": "overpayment", "messages": [str(exc)]})
    return HTTPException(status_code=500, detail="Internal server error")
