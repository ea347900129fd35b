import logging
from typing import Any, Sequence

import click

from .core.click_factory import render_usage
from .core.conversion import ConverterRegistry
from .core.engine import DispatchEngine
from .core.schema import Schema, build_schema

logger = logging.getLogger(__name__)


def parse_and_run(
    instance: Any,
    argv: Sequence[str],
    *,
    registry: ConverterRegistry | None = None,
    prog_name: str | None = None,
) -> DispatchEngine:
    """Build the schema of ``instance``, parse ``argv`` and dispatch.

    Returns the finished engine so callers can inspect which handlers ran.

    Raises:
        SchemaError: the decorated methods do not form a valid schema.
        DispatchError: parsing, conversion or a handler failed.
    """

    schema = build_schema(instance, registry)
    schema.require_entry_point()
    engine = DispatchEngine(schema, prog_name=prog_name or type(instance).__name__.lower())
    engine.run(argv)
    logger.debug("run finished: %s", engine.outcome and engine.outcome.value)
    return engine


def usage_text(
    instance: Any,
    app_name: str,
    header: str | None = None,
    footer: str | None = None,
    *,
    registry: ConverterRegistry | None = None,
) -> str:
    return render_usage(app_name, header, footer, build_schema(instance, registry))


class CommandLineApplication:
    """Base class for applications declared with ``@option`` and ``@entry_point``.

    Subclasses may set ``registry`` to a :class:`ConverterRegistry` carrying
    their own conversions.
    """

    registry: ConverterRegistry | None = None
    prog_name: str | None = None

    def schema(self) -> Schema:
        return build_schema(self, self.registry)

    def parse_and_run(self, argv: Sequence[str]) -> DispatchEngine:
        return parse_and_run(self, argv, registry=self.registry, prog_name=self.prog_name)

    def usage_text(self, app_name: str, header: str | None = None, footer: str | None = None) -> str:
        return usage_text(self, app_name, header, footer, registry=self.registry)

    def print_usage(self, app_name: str, header: str | None = None, footer: str | None = None) -> None:
        click.echo(self.usage_text(app_name, header, footer))
