from fastapi import Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from typing import Optional, Any
from pydantic import BaseModel


def serialize_data(data: Any) -> Any:
    # Schemas go out with their camelCase aliases
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, list):
        return [serialize_data(item) for item in data]
    if isinstance(data, dict):
        return {key: serialize_data(value) for key, value in data.items()}
    return jsonable_encoder(data)


def build_response(
    status_code: int,
    success: bool,
    message: Optional[str] = None,
    data: Any = None,
    error: Optional[str] = None,
    details: Any = None,
) -> Response:
    """Wrap a payload in the success or error envelope.

    Success: {"success": true, "message": str, "data": T}
    Error:   {"success": false, "error": code, "message"?: str, "details"?: any}
    """
    if status_code == 204:
        return Response(status_code=204)

    response = {"success": success}

    if success:
        response["message"] = message or ""
        response["data"] = serialize_data(data) if data is not None else {}
    else:
        response["error"] = error or "internal_error"
        if message:
            response["message"] = message
        if details is not None:
            response["details"] = serialize_data(details)

    return JSONResponse(
        content=response,
        status_code=status_code,
        media_type="application/json",
    )
