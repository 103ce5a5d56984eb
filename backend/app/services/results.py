"""Uniform ``{success, message, ...}`` result returned by workflow transitions."""
import enum
from dataclasses import dataclass, field
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class ResultCode(str, enum.Enum):
    ok = "ok"
    not_found = "not_found"
    forbidden = "forbidden"
    invalid_state = "invalid_state"
    conflict = "conflict"
    validation_error = "validation_error"


HTTP_STATUS = {
    ResultCode.ok: 200,
    ResultCode.not_found: 404,
    ResultCode.forbidden: 403,
    ResultCode.invalid_state: 409,
    ResultCode.conflict: 409,
    ResultCode.validation_error: 422,
}


@dataclass
class WorkflowResult:
    success: bool
    message: str
    code: ResultCode = ResultCode.ok
    data: dict[str, Any] = field(default_factory=dict)


def ok(message: str, **data: Any) -> WorkflowResult:
    return WorkflowResult(success=True, message=message, data=data)


def fail(code: ResultCode, message: str, **data: Any) -> WorkflowResult:
    return WorkflowResult(success=False, message=message, code=code, data=data)


def to_response(result: WorkflowResult, success_status: int = 200) -> JSONResponse:
    """Render a result with the HTTP status matching its code."""
    body: dict[str, Any] = {"success": result.success, "message": result.message}
    if not result.success:
        body["error"] = result.code.value
    body.update(result.data)
    status_code = success_status if result.success else HTTP_STATUS[result.code]
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))
