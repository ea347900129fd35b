from dataclasses import dataclass
from typing import Any, Callable

from .errors import SchemaError

Handler = Callable[..., Any]

OPTION_ATTR = "__optbind_option__"
ENTRY_POINT_ATTR = "__optbind_entry_point__"


@dataclass(frozen=True)
class OptionMeta:
    usage: str
    short_form: str | None = None
    long_form: str | None = None
    argument_type: Any = None
    required: bool = False
    argument_separator: str = ","
    maximum_argument_count: int = 1
    optional_argument: bool = False

    def __post_init__(self) -> None:
        if not self.usage:
            raise SchemaError("option usage text is required")
        if self.short_form is not None and len(self.short_form) != 1:
            raise SchemaError(f"short form must be a single character, got {self.short_form!r}")
        if len(self.argument_separator) != 1:
            raise SchemaError(
                f"argument separator must be a single character, got {self.argument_separator!r}"
            )
        if self.maximum_argument_count < 1:
            raise SchemaError("maximum argument count must be at least 1")


@dataclass(frozen=True)
class EntryPointMeta:
    metavar: str | None = None


def _first_doc_line(fn: Handler) -> str:
    doc = (fn.__doc__ or "").strip()
    return doc.splitlines()[0].strip() if doc else ""


def option(
    short_form: str | None = None,
    long_form: str | None = None,
    *,
    usage: str | None = None,
    argument_type: Any = None,
    required: bool = False,
    argument_separator: str = ",",
    maximum_argument_count: int = 1,
    optional_argument: bool = False,
):
    """Decorator marking a method as the handler of a command-line option.

    Args:
        short_form: Single character, exposed as ``-c``.
        long_form: Exposed as ``--long-form``. When both forms are empty the
            handler name is used (underscores become hyphens).
        usage: Help text (defaults to the first docstring line).
        argument_type: Element type for ``list`` parameters, or an override of
            the annotated element type.
        required: The option must be present on the command line.
        argument_separator: Splits one value into several.
        maximum_argument_count: Upper bound on the number of values.
        optional_argument: The option may be given without a value.
    """

    def decorate(fn: Handler) -> Handler:
        try:
            meta = OptionMeta(
                usage=usage or _first_doc_line(fn),
                short_form=short_form or None,
                long_form=long_form or None,
                argument_type=argument_type,
                required=required,
                argument_separator=argument_separator,
                maximum_argument_count=maximum_argument_count,
                optional_argument=optional_argument,
            )
        except SchemaError as e:
            raise SchemaError(f"{fn.__qualname__}: {e}") from None
        setattr(fn, OPTION_ATTR, meta)
        return fn

    return decorate


def entry_point(*, metavar: str | None = None):
    """Decorator marking the method that receives the positional arguments."""

    def decorate(fn: Handler) -> Handler:
        setattr(fn, ENTRY_POINT_ATTR, EntryPointMeta(metavar=metavar))
        return fn

    return decorate
