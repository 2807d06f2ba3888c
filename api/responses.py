"""
api/responses.py -- Result envelope -> HTTP response mapping.

StatusCode values are HTTP status numbers, so the mapping is the identity:
OK->200, BadRequest->400, Unauthorized->401, NotFound->404, Conflict->409,
TooManyRequests->429. The message key is resolved to display text here and
nowhere else.
"""

from __future__ import annotations

from typing import Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.models import ResultResponse
from core.messages import Localizer
from core.results import Result


def envelope(
    result: Result,
    localizer: Localizer,
    data: Optional[BaseModel] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Render result as a JSONResponse. data is the API-model form of result.data."""
    body = ResultResponse(
        success=result.success,
        status_code=int(result.status),
        message_key=result.message.value,
        message=localizer.resolve(result.message),
        data=data.model_dump() if (result.success and data is not None) else None,
    )
    return JSONResponse(status_code=int(result.status), content=body.model_dump(), headers=headers)
