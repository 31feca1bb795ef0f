"""Translate domain errors into HTTP errors for the route handlers."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..errors import (
    GeocodingError,
    HaulopsError,
    OwnerRequiredError,
    PersistenceError,
    RoutingError,
    ValidationError,
)


def to_http_exception(exc: Exception, action: str) -> HTTPException:
    if isinstance(exc, OwnerRequiredError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, GeocodingError) and exc.missing:
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(exc), "missing": exc.missing},
        )
    if isinstance(exc, (GeocodingError, RoutingError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"{action}: {exc}")
    if isinstance(exc, PersistenceError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    if isinstance(exc, LookupError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if not isinstance(exc, HaulopsError):
        logging.exception(f"{action}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"{action}: {str(exc)}",
    )
