"""One parse-and-dispatch run over a built schema.

Every present option handler runs, in declaration order, even after one of
them has vetoed the entry point; a veto only decides whether the entry point
is called at the end. Failures abort the run immediately.
"""

import logging
from enum import Enum
from typing import Sequence

import click

from .click_factory import ParseResult, parse_arguments
from .conversion import invoke_binding
from .errors import DispatchError, DispatchFailure
from .schema import Schema

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    INITIAL = "initial"
    SCHEMA_BUILT = "schema_built"
    PARSED = "parsed"
    DISPATCHING = "dispatching"
    ENTRY_POINT_INVOKED = "entry_point_invoked"
    SUPPRESSED = "suppressed"
    DONE = "done"


class DispatchEngine:
    def __init__(self, schema: Schema, *, prog_name: str = "app") -> None:
        self.schema: Schema | None = schema
        self.prog_name = prog_name
        self.state = RunState.SCHEMA_BUILT
        self.invoked: list[str] = []
        self.outcome: RunState | None = None

    def _parse(self, schema: Schema, argv: Sequence[str]) -> ParseResult:
        try:
            parsed = parse_arguments(schema, argv, self.prog_name)
        except click.ClickException as e:
            raise DispatchError(
                DispatchFailure.PARSE, f"Unable to parse command line: {e.format_message()}"
            ) from e
        self.state = RunState.PARSED
        return parsed

    def run(self, argv: Sequence[str]) -> None:
        if self.state is not RunState.SCHEMA_BUILT or self.schema is None:
            raise RuntimeError(f"dispatch engine already used (state: {self.state.value})")

        schema = self.schema
        entry = schema.require_entry_point()
        parsed = self._parse(schema, argv)

        self.state = RunState.DISPATCHING
        continue_dispatch = True
        for descriptor in schema.options:
            if not parsed.is_present(descriptor):
                continue
            opinion = invoke_binding(descriptor.binding, parsed.tokens(descriptor))
            self.invoked.append(descriptor.name)
            logger.debug("option %s -> %r", descriptor.display_name, opinion)
            if opinion is False:
                continue_dispatch = False

        if not continue_dispatch:
            logger.debug("entry point %s suppressed", entry.name)
            self.outcome = RunState.SUPPRESSED
            self.state = RunState.DONE
            return

        residual = parsed.residual
        # the entry point only needs the residual arguments
        del parsed, schema
        self.schema = None

        self.state = self.outcome = RunState.ENTRY_POINT_INVOKED
        invoke_binding(entry.binding, residual)
        self.state = RunState.DONE
