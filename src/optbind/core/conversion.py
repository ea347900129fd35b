import datetime
import logging
import pathlib
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Sequence

import click

from .arity import Arity, Signature
from .errors import DispatchError, DispatchFailure

logger = logging.getLogger(__name__)

Converter = Callable[[str], Any]


class _CallableType(click.ParamType):
    def __init__(self, fn: Converter, target: Any) -> None:
        self.fn = fn
        self.name = getattr(target, "__name__", str(target))

    def convert(self, value: Any, param: Any, ctx: Any) -> Any:
        try:
            return self.fn(value)
        except Exception as e:
            self.fail(f"{value!r} is not a valid {self.name}: {e}", param, ctx)


class EnumType(click.ParamType):
    """Convert by member value first, then by member name (case-insensitive)."""

    def __init__(self, enum_cls: type[Enum]) -> None:
        self.enum_cls = enum_cls
        self.name = enum_cls.__name__

    def convert(self, value: Any, param: Any, ctx: Any) -> Any:
        if isinstance(value, self.enum_cls):
            return value
        for member in self.enum_cls:
            if str(member.value) == value:
                return member
        for member in self.enum_cls:
            if member.name.lower() == str(value).lower():
                return member
        choices = ", ".join(str(m.value) for m in self.enum_cls)
        self.fail(f"{value!r} is not one of {choices}", param, ctx)


def _default_types() -> dict[Any, click.ParamType]:
    return {
        str: click.STRING,
        int: click.INT,
        float: click.FLOAT,
        bool: click.BOOL,
        uuid.UUID: click.UUID,
        pathlib.Path: click.Path(path_type=pathlib.Path),
        datetime.datetime: click.DateTime(),
    }


class ConverterRegistry:
    """String-to-type conversion lookup keyed by target type."""

    def __init__(self) -> None:
        self._types: dict[Any, click.ParamType] = _default_types()

    def register(self, target: Any, converter: click.ParamType | Converter) -> None:
        if not isinstance(converter, click.ParamType):
            converter = _CallableType(converter, target)
        self._types[target] = converter

    def lookup(self, target: Any) -> click.ParamType | None:
        found = self._types.get(target)
        if found is not None:
            return found
        if isinstance(target, type) and issubclass(target, Enum):
            return EnumType(target)
        return None

    def convert(self, target: Any, token: str) -> Any:
        param_type = self.lookup(target)
        if param_type is None:
            raise LookupError(f"no conversion available for type {target!r}")
        return convert_token(param_type, target, token)

    @staticmethod
    def to_token(value: Any) -> str:
        if isinstance(value, Enum):
            return str(value.value)
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, datetime.datetime):
            return value.isoformat(sep=" ")
        return str(value)


default_registry = ConverterRegistry()


def convert_token(param_type: click.ParamType, target: Any, token: str) -> Any:
    try:
        return param_type.convert(token, None, None)
    except click.BadParameter as e:
        raise DispatchError(
            DispatchFailure.CONVERSION,
            f"Cannot convert {token!r} to {getattr(target, '__name__', target)}: {e.format_message()}",
            token=token,
            target_type=target,
        ) from e


@dataclass(frozen=True)
class HandlerBinding:
    """A bound handler plus the converter resolved for its element type."""

    name: str
    handler: Callable[..., Any]
    signature: Signature
    converter: click.ParamType | None = None

    def convert(self, tokens: Sequence[str]) -> list[Any]:
        if self.converter is None:
            raise RuntimeError(f"{self.name} takes no arguments")
        return [convert_token(self.converter, self.signature.element_type, t) for t in tokens]

    def call(self, *args: Any) -> bool | None:
        try:
            result = self.handler(*args)
        except Exception as e:
            raise DispatchError(
                DispatchFailure.HANDLER_INVOCATION,
                f"Unable to invoke method {self.name}: {e}",
                handler=self.name,
            ) from e
        # only handlers declared (or left unannotated) as returning bool vote
        if self.signature.returns_flag and isinstance(result, bool):
            return result
        return None


def invoke_binding(binding: HandlerBinding, tokens: Sequence[str] | None) -> bool | None:
    """Convert ``tokens`` for ``binding``'s arity and call the handler.

    ``tokens`` is ``None`` when an optional argument was omitted. Returns the
    handler's opinion on continuing: ``False`` vetoes, ``True``/``None`` do not.
    """

    arity = binding.signature.arity

    if arity is Arity.NO_ARGUMENT:
        return binding.call()

    if arity is Arity.SCALAR:
        if tokens is None:
            return binding.call(None)
        opinion: bool | None = None
        for token in tokens:
            (value,) = binding.convert([token])
            result = binding.call(value)
            if result is not None:
                opinion = result
            if opinion is False:
                logger.debug("%s returned False after %r, stopping", binding.name, token)
                break
        return opinion

    values = binding.convert(tokens or ())
    if arity is Arity.FIXED_SEQUENCE:
        return binding.call(tuple(values))
    return binding.call(values)
