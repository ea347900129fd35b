from enum import Enum, IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Stable numeric error catalog."""

    OK = 0

    # 1xxx: input
    E_INPUT_INVALID = 1001
    E_INPUT_CONVERSION = 1002

    # 2xxx: schema
    E_SCHEMA_SIGNATURE = 2001
    E_SCHEMA_INVALID = 2002

    # 5xxx: domain
    E_HANDLER_FAILED = 5001

    # 9xxx: bugs
    E_BUG_UNHANDLED = 9001


class DispatchFailure(str, Enum):
    PARSE = "parse"
    CONVERSION = "conversion"
    HANDLER_INVOCATION = "handler_invocation"


class OptBindError(RuntimeError):
    code: ErrorCode = ErrorCode.E_BUG_UNHANDLED


class SignatureError(OptBindError):
    """A handler's shape cannot be classified."""

    code = ErrorCode.E_SCHEMA_SIGNATURE


class SchemaError(OptBindError):
    """The set of handlers does not form a usable schema."""

    code = ErrorCode.E_SCHEMA_INVALID


class ApplicationError(OptBindError):
    """Failure kind handlers are expected to raise for application-level problems."""

    code = ErrorCode.E_HANDLER_FAILED


_DISPATCH_CODES = {
    DispatchFailure.PARSE: ErrorCode.E_INPUT_INVALID,
    DispatchFailure.CONVERSION: ErrorCode.E_INPUT_CONVERSION,
    DispatchFailure.HANDLER_INVOCATION: ErrorCode.E_HANDLER_FAILED,
}


class DispatchError(OptBindError):
    def __init__(
        self,
        kind: DispatchFailure,
        message: str,
        *,
        token: str | None = None,
        target_type: Any = None,
        handler: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.token = token
        self.target_type = target_type
        self.handler = handler
        self.code = _DISPATCH_CODES[kind]

    def details(self) -> dict[str, Any]:
        out: dict[str, Any] = {"kind": self.kind.value}
        if self.handler is not None:
            out["handler"] = self.handler
        if self.token is not None:
            out["token"] = self.token
        if self.target_type is not None:
            out["target_type"] = getattr(self.target_type, "__name__", str(self.target_type))
        if self.__cause__ is not None:
            out["cause"] = repr(self.__cause__)
        return out
