"""Uniform JSON envelope for every endpoint.

    {
        "success": true,
        "code": 0,            // 0 on success, AppError.code otherwise
        "message": "success",
        "data": { ... },      // null on error
        "timestamp": "2026-03-01T12:00:00+00:00",
        "request_id": "req_a1b2c3d4e5f6"
    }
"""

import uuid
from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.sa_common.datetime_utils import utc_now


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    success: bool = True
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=new_request_id)


def success_response(data: Any = None, request_id: str | None = None) -> ApiResponse:
    resp = ApiResponse(data=data)
    if request_id:
        resp.request_id = request_id
    return resp


def error_response(code: int, message: str, request_id: str | None = None) -> ApiResponse:
    resp = ApiResponse(success=False, code=code, message=message)
    if request_id:
        resp.request_id = request_id
    return resp


def json_response(resp: ApiResponse, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=resp.model_dump())
