from dataclasses import dataclass, field
from typing import Any

from .errors import DispatchError, ErrorCode, OptBindError


@dataclass
class ResultObject:
    """Outcome of one application run, as seen from the process boundary."""

    ok: bool = True
    events: list[dict[str, Any]] = field(default_factory=list)

    def record(
        self, kind: str, code: ErrorCode, message: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        self.events.append(
            {
                "kind": kind,
                "message": message,
                "code": code.name,
                "code_num": int(code),
                "details": details or {},
            }
        )

    def fail(self, exc: OptBindError) -> None:
        self.ok = False
        details = exc.details() if isinstance(exc, DispatchError) else {"error": type(exc).__name__}
        self.record("error", exc.code, str(exc), details)

    def to_payload(self) -> dict[str, Any]:
        return {"ok": self.ok, "events": self.events}
