"""Shared schema base and error translation for the HTTP layer."""

from __future__ import annotations

from fastapi import HTTPException, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from courseconnect.modules.documents import ExtractionTimeout, FileTooLarge
from courseconnect.modules.quiz import InvalidTransition, SessionNotFound


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys like the web client sends."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def http_error(exc: Exception) -> HTTPException:
    """Translate a domain ``ValueError`` into the matching HTTP error."""
    if isinstance(exc, SessionNotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InvalidTransition):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, FileTooLarge):
        code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    elif isinstance(exc, ExtractionTimeout):
        code = status.HTTP_504_GATEWAY_TIMEOUT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))
