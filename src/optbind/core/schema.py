import inspect
import logging
from dataclasses import dataclass
from typing import Any, Iterator

from .arity import Arity, Role, classify_signature
from .conversion import ConverterRegistry, HandlerBinding, default_registry
from .dispatch import ENTRY_POINT_ATTR, OPTION_ATTR, EntryPointMeta, Handler, OptionMeta
from .errors import SchemaError, SignatureError

logger = logging.getLogger(__name__)


def _flag(name: str) -> str:
    return name.replace("_", "-")


@dataclass(frozen=True)
class OptionDescriptor:
    name: str
    short_name: str | None
    long_name: str | None
    usage: str
    required: bool
    maximum_argument_count: int
    argument_separator: str
    optional_argument: bool
    binding: HandlerBinding

    @property
    def arity(self) -> Arity:
        return self.binding.signature.arity

    @property
    def element_type(self) -> Any:
        return self.binding.signature.element_type

    @property
    def takes_argument(self) -> bool:
        return self.arity is not Arity.NO_ARGUMENT

    @property
    def display_name(self) -> str:
        return f"--{self.long_name}" if self.long_name else f"-{self.short_name}"


@dataclass(frozen=True)
class EntryPointDescriptor:
    name: str
    metavar: str | None
    binding: HandlerBinding

    @property
    def arity(self) -> Arity:
        return self.binding.signature.arity

    @property
    def element_type(self) -> Any:
        return self.binding.signature.element_type


@dataclass(frozen=True)
class Schema:
    options: tuple[OptionDescriptor, ...] = ()
    entry_point: EntryPointDescriptor | None = None

    def require_entry_point(self) -> EntryPointDescriptor:
        if self.entry_point is None:
            raise SchemaError("no entry point declared")
        return self.entry_point


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__name__", None) or repr(handler)


class SchemaBuilder:
    """Explicit registration table for option handlers and the entry point."""

    def __init__(self, registry: ConverterRegistry | None = None) -> None:
        self.registry = registry or default_registry
        self._options: list[OptionDescriptor] = []
        self._entry_point: EntryPointDescriptor | None = None
        self._short: dict[str, str] = {}
        self._long: dict[str, str] = {}

    def _bind(self, handler: Handler, name: str, argument_type: Any, role: Role) -> HandlerBinding:
        try:
            sig = classify_signature(handler, argument_type=argument_type, role=role)
        except SignatureError as e:
            raise SchemaError(f"Invalid {role} {name}: {e}") from e

        if sig.arity is Arity.NO_ARGUMENT:
            return HandlerBinding(name=name, handler=handler, signature=sig)

        converter = self.registry.lookup(sig.element_type)
        if converter is None:
            raise SchemaError(
                f"no conversion available for type {sig.element_type!r} for method {name}"
            )
        return HandlerBinding(name=name, handler=handler, signature=sig, converter=converter)

    def _claim(self, table: dict[str, str], form: str, value: str | None, name: str) -> None:
        if value is None:
            return
        if value in table:
            raise SchemaError(
                f"{form} option name {value!r} of {name} already used by {table[value]}"
            )
        table[value] = name

    def add_option(self, handler: Handler, meta: OptionMeta, *, name: str | None = None) -> OptionDescriptor:
        name = name or _handler_name(handler)
        binding = self._bind(handler, name, meta.argument_type, "option")

        if (
            binding.signature.arity is Arity.SCALAR
            and meta.optional_argument
            and not binding.signature.accepts_none
        ):
            raise SchemaError(
                f"Option {name} declares an optional argument but its parameter "
                "cannot accept None; annotate it as Optional or default it to None"
            )

        short_name = meta.short_form
        long_name = meta.long_form
        if short_name is None and long_name is None:
            long_name = _flag(name)

        self._claim(self._short, "short", short_name, name)
        self._claim(self._long, "long", long_name, name)

        descriptor = OptionDescriptor(
            name=name,
            short_name=short_name,
            long_name=long_name,
            usage=meta.usage,
            required=meta.required,
            maximum_argument_count=meta.maximum_argument_count,
            argument_separator=meta.argument_separator,
            optional_argument=meta.optional_argument,
            binding=binding,
        )
        self._options.append(descriptor)
        logger.debug("option %s bound to %s (%s)", descriptor.display_name, name, binding.signature.arity.value)
        return descriptor

    def set_entry_point(
        self, handler: Handler, meta: EntryPointMeta | None = None, *, name: str | None = None
    ) -> EntryPointDescriptor:
        name = name or _handler_name(handler)
        if self._entry_point is not None:
            raise SchemaError(
                f"duplicate entry point: {name} (already declared by {self._entry_point.name})"
            )

        binding = self._bind(handler, name, None, "entry point")
        if binding.signature.arity is Arity.NO_ARGUMENT:
            raise SchemaError(f"Entry point {name} must take arguments")

        self._entry_point = EntryPointDescriptor(
            name=name,
            metavar=(meta.metavar if meta else None),
            binding=binding,
        )
        logger.debug("entry point bound to %s (%s)", name, binding.signature.arity.value)
        return self._entry_point

    def build(self) -> Schema:
        return Schema(options=tuple(self._options), entry_point=self._entry_point)


def _declared_names(instance: Any) -> Iterator[str]:
    seen: set[str] = set()
    for cls in reversed(type(instance).__mro__):
        for attr in vars(cls):
            if attr not in seen:
                seen.add(attr)
                yield attr


def build_schema(instance: Any, registry: ConverterRegistry | None = None) -> Schema:
    """Discover decorated methods on ``instance`` and build its schema.

    Options keep their declaration order, base classes first. A missing entry
    point is allowed here and only rejected by :meth:`Schema.require_entry_point`.
    """

    builder = SchemaBuilder(registry)
    cls = type(instance)

    for attr in _declared_names(instance):
        # class lookup: instance attributes must not hide handlers
        member = inspect.getattr_static(cls, attr)
        raw = member
        if isinstance(raw, (staticmethod, classmethod)):
            raw = raw.__func__

        option_meta = getattr(raw, OPTION_ATTR, None)
        entry_meta = getattr(raw, ENTRY_POINT_ATTR, None)
        if option_meta is None and entry_meta is None:
            continue
        if option_meta is not None and entry_meta is not None:
            raise SchemaError(f"{attr} cannot be both an option and the entry point")

        handler = member.__get__(instance, cls)
        if option_meta is not None:
            builder.add_option(handler, option_meta, name=attr)
        else:
            builder.set_entry_point(handler, entry_meta, name=attr)

    return builder.build()
