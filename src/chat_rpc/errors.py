"""Error types raised by the RPC layer and rebuilt by the client."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

# code -> (JSON-RPC numeric code, HTTP status)
ERROR_CODES: Dict[str, tuple[int, int]] = {
    "BAD_REQUEST": (-32600, 400),
    "NOT_FOUND": (-32004, 404),
    "METHOD_NOT_SUPPORTED": (-32005, 405),
    "INTERNAL_SERVER_ERROR": (-32603, 500),
}


class RPCError(Exception):
    """Base error carrying a string code such as ``BAD_REQUEST``."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        path: Optional[str] = None,
        issues: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.path = path
        self.issues = list(issues or [])

    @property
    def json_rpc_code(self) -> int:
        return ERROR_CODES.get(self.code, ERROR_CODES["INTERNAL_SERVER_ERROR"])[0]

    @property
    def http_status(self) -> int:
        return ERROR_CODES.get(self.code, ERROR_CODES["INTERNAL_SERVER_ERROR"])[1]

    def to_envelope(self) -> Dict[str, Any]:
        """Render as the ``{"id": null, "error": {...}}`` response body."""
        data: Dict[str, Any] = {
            "code": self.code,
            "httpStatus": self.http_status,
            "path": self.path,
        }
        if self.issues:
            data["issues"] = self.issues
        return {
            "id": None,
            "error": {"message": self.message, "code": self.json_rpc_code, "data": data},
        }

    @classmethod
    def from_envelope(cls, body: Dict[str, Any]) -> "RPCError":
        err = body.get("error") or {}
        data = err.get("data") or {}
        code = str(data.get("code") or "INTERNAL_SERVER_ERROR")
        subclass = _BY_CODE.get(code, cls)
        return subclass(
            str(err.get("message") or code),
            code=code,
            path=data.get("path"),
            issues=data.get("issues"),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, path={self.path!r}, message={self.message!r})"


class InputValidationError(RPCError):
    """Procedure input failed its schema; ``issues`` names the offending fields."""

    code = "BAD_REQUEST"


class ProcedureNotFound(RPCError):
    code = "NOT_FOUND"


class MethodNotSupported(RPCError):
    """A query was called as a mutation or the other way round."""

    code = "METHOD_NOT_SUPPORTED"


_BY_CODE: Dict[str, type] = {
    "BAD_REQUEST": InputValidationError,
    "NOT_FOUND": ProcedureNotFound,
    "METHOD_NOT_SUPPORTED": MethodNotSupported,
}
