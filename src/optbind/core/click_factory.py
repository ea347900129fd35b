from dataclasses import dataclass, field
from typing import Any, Sequence

import click
from click.core import ParameterSource

from .schema import OptionDescriptor, Schema

# Value click reports for an optional-argument option given without a value.
_OMITTED = "\x00optbind-omitted"

_RESIDUAL = "arguments"


def _param_name(index: int) -> str:
    return f"option_{index}"


def _split(descriptor: OptionDescriptor, raw: Sequence[str]) -> tuple[str, ...]:
    limit = descriptor.maximum_argument_count
    values: list[str] = []
    # the limit applies to each occurrence, values of repeated occurrences accumulate
    for item in raw:
        pieces = item.split(descriptor.argument_separator) if limit > 1 else [item]
        if len(pieces) > limit:
            raise click.BadOptionUsage(
                descriptor.display_name,
                f"Option {descriptor.display_name} accepts at most {limit} "
                f"value{'s' if limit != 1 else ''} per occurrence, got {len(pieces)}",
            )
        values.extend(pieces)
    return tuple(values)


def _decls(descriptor: OptionDescriptor, index: int) -> list[str]:
    decls: list[str] = []
    if descriptor.short_name:
        decls.append("-" + descriptor.short_name)
    if descriptor.long_name:
        decls.append("--" + descriptor.long_name)
    decls.append(_param_name(index))
    return decls


def _metavar(descriptor: OptionDescriptor) -> str:
    element = getattr(descriptor.element_type, "__name__", "value").upper()
    if descriptor.maximum_argument_count > 1:
        element = f"{element}[{descriptor.argument_separator}{element}...]"
    if descriptor.optional_argument:
        element = f"[{element}]"
    return element


def _make_option(descriptor: OptionDescriptor, index: int) -> click.Option:
    decls = _decls(descriptor, index)

    if not descriptor.takes_argument:
        # no explicit default, click only enforces required flags while the default is unset
        return click.Option(decls, is_flag=True, required=descriptor.required, help=descriptor.usage)

    if descriptor.optional_argument:
        return click.Option(
            decls,
            type=click.STRING,
            is_flag=False,
            flag_value=_OMITTED,
            default=None,
            required=descriptor.required,
            metavar=_metavar(descriptor),
            help=descriptor.usage,
        )

    return click.Option(
        decls,
        type=click.STRING,
        multiple=True,
        required=descriptor.required,
        metavar=_metavar(descriptor),
        help=descriptor.usage,
    )


def build_command(
    schema: Schema, prog_name: str, *, header: str | None = None, footer: str | None = None
) -> click.Command:
    """Translate a schema into a click command used purely for tokenizing and help."""

    params: list[click.Parameter] = [
        _make_option(descriptor, index) for index, descriptor in enumerate(schema.options)
    ]
    if schema.entry_point is not None:
        metavar = schema.entry_point.metavar or schema.entry_point.name.upper()
        params.append(click.Argument([_RESIDUAL], nargs=-1, metavar=f"[{metavar}]..."))

    return click.Command(
        name=prog_name,
        params=params,
        help=header,
        epilog=footer,
        add_help_option=False,
        no_args_is_help=False,
    )


@dataclass
class ParseResult:
    values: dict[str, tuple[str, ...] | None] = field(default_factory=dict)
    residual: tuple[str, ...] = ()

    def is_present(self, descriptor: OptionDescriptor) -> bool:
        return descriptor.name in self.values

    def tokens(self, descriptor: OptionDescriptor) -> tuple[str, ...] | None:
        return self.values.get(descriptor.name, ())


def parse_arguments(schema: Schema, argv: Sequence[str], prog_name: str = "app") -> ParseResult:
    """Tokenize ``argv`` against ``schema`` with click.

    Raises:
        click.ClickException: unknown option, missing required option,
            missing or surplus values.
    """

    command = build_command(schema, prog_name)
    ctx = command.make_context(prog_name, list(argv))
    result = ParseResult(residual=tuple(ctx.params.get(_RESIDUAL) or ()))

    for index, descriptor in enumerate(schema.options):
        key = _param_name(index)
        if ctx.get_parameter_source(key) is not ParameterSource.COMMANDLINE:
            continue
        raw: Any = ctx.params.get(key)
        if not descriptor.takes_argument:
            result.values[descriptor.name] = ()
        elif descriptor.optional_argument:
            result.values[descriptor.name] = (
                None if raw in (None, _OMITTED) else _split(descriptor, [raw])
            )
        else:
            result.values[descriptor.name] = _split(descriptor, raw or ())
    return result


def render_usage(
    app_name: str, header: str | None, footer: str | None, schema: Schema
) -> str:
    command = build_command(schema, app_name, header=header, footer=footer)
    ctx = click.Context(command, info_name=app_name)
    return command.get_help(ctx)
