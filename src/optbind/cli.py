import json
import sys
from typing import Any, Sequence

import click

from .app import CommandLineApplication, parse_and_run
from .core.engine import DispatchEngine, RunState
from .core.errors import ErrorCode, OptBindError
from .core.results import ResultObject
from .core.settings import load_settings


def _render(results: ResultObject, *, output: str, quiet: bool) -> None:
    if quiet:
        return
    if output == "json":
        click.echo(json.dumps(results.to_payload(), default=str), err=not results.ok)
        return

    for ev in results.events:
        if ev.get("kind") != "error":
            continue
        code = ev.get("code")
        code_num = ev.get("code_num")
        code_part = f" ({code}:{code_num})" if code or code_num is not None else ""
        msg = ev.get("message")
        details_map = ev.get("details", {})
        tail = " ".join(f"{k}={v}" for k, v in details_map.items())
        line = "[error]" + code_part + (f" {msg}" if msg else "") + (f" {tail}" if tail else "")
        click.echo(line, err=True)


def _exit_code_from_events(results: ResultObject) -> int:
    if results.ok:
        return 0

    # 1xxx: input -> 1
    # 2xxx: schema -> 2
    # 5xxx, 9xxx: handler failures and bugs -> 70
    code_nums: list[int] = []
    for ev in results.events:
        if ev.get("kind") != "error":
            continue
        code_num = ev.get("code_num")
        if isinstance(code_num, int):
            code_nums.append(code_num)
    if any(n >= 5000 for n in code_nums) or not code_nums:
        return 70
    if any(1000 <= n < 2000 for n in code_nums):
        return 1
    return 2


def _dispatch(app: Any, argv: Sequence[str]) -> DispatchEngine:
    if isinstance(app, CommandLineApplication):
        return app.parse_and_run(argv)
    return parse_and_run(
        app,
        argv,
        registry=getattr(app, "registry", None),
        prog_name=getattr(app, "prog_name", None),
    )


def run(
    app: Any,
    argv: Sequence[str] | None = None,
    *,
    output: str | None = None,
    quiet: bool | None = None,
) -> tuple[ResultObject, int]:
    """Programmatic entry point returning structured results and exit code."""

    argv = list(argv) if argv is not None else sys.argv[1:]
    settings = load_settings()
    output = output or settings.output
    quiet = settings.quiet if quiet is None else quiet

    results = ResultObject()
    try:
        engine = _dispatch(app, argv)
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except OptBindError as e:
        results.fail(e)
    except Exception as e:
        results.ok = False
        results.record(
            "error", ErrorCode.E_BUG_UNHANDLED, "Unhandled exception", {"exception": repr(e)}
        )
    else:
        results.record(
            "run",
            ErrorCode.OK,
            details={
                "options": list(engine.invoked),
                "entry_point": engine.outcome is RunState.ENTRY_POINT_INVOKED,
            },
        )

    _render(results, output=output, quiet=quiet)
    return results, _exit_code_from_events(results)


def main(app: Any, argv: Sequence[str] | None = None) -> int:
    """CLI entry point for an application instance."""

    _, code = run(app, argv)
    return code
