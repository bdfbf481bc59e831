"""ActionResult: what every live auction operation hands to the transport.

Core operations never raise to the router: a rejected command comes back as
``success=False`` with the failure kind preserved for logging and the code /
HTTP status the router puts on the wire.
"""

from dataclasses import dataclass
from typing import Any

from src.sa_common.errors import AppError


@dataclass(frozen=True)
class ActionResult:
    success: bool
    data: Any = None
    error: str | None = None
    error_kind: str | None = None
    error_code: int = 0
    http_status: int = 200

    @classmethod
    def ok(cls, data: Any = None) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, exc: AppError) -> "ActionResult":
        return cls(
            success=False,
            error=exc.message,
            error_kind=exc.kind,
            error_code=exc.code,
            http_status=exc.http_status,
        )
