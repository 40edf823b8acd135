"""
Response envelope.

Every endpoint (success or failure) answers with::

    {"statusCode": 201, "success": true, "message": "...", "data": ..., "errors": null}
"""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def _encode(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, mode="json")
    if isinstance(data, (list, tuple)):
        return [_encode(item) for item in data]
    if isinstance(data, dict):
        return {key: _encode(value) for key, value in data.items()}
    return jsonable_encoder(data)


def envelope(
    status_code: int,
    message: str,
    data: Any = None,
    errors: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the JSON response for any outcome."""
    return JSONResponse(
        status_code=status_code,
        content={
            "statusCode": status_code,
            "success": 200 <= status_code < 300,
            "message": message,
            "data": _encode(data),
            "errors": errors,
        },
    )
