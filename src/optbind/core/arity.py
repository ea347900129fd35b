"""Handler signature classification.

A handler's parameter list decides how option values reach it:

* no parameters: the handler is a switch and is called without arguments;
* ``tuple[T, ...]``: called once with every value converted to ``T``;
* ``list[T]``: called once with a list of converted values;
* anything else: called once per value, each converted to the annotation.

Return annotations are limited to ``bool`` and ``None``. A ``bool`` result is
the handler's vote on whether the entry point should still run.
"""

import collections.abc
import inspect
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Literal, Union, get_args, get_origin, get_type_hints

from .errors import SignatureError

Role = Literal["option", "entry point"]


class Arity(str, Enum):
    NO_ARGUMENT = "no_argument"
    SCALAR = "scalar"
    FIXED_SEQUENCE = "fixed_sequence"
    VARIABLE_SEQUENCE = "variable_sequence"


@dataclass(frozen=True)
class Signature:
    arity: Arity
    element_type: Any = None
    returns_flag: bool = False
    accepts_none: bool = False


_LIST_ORIGINS = (list, typing.List, collections.abc.MutableSequence)
_TUPLE_ORIGINS = (tuple, typing.Tuple)


def _hints(fn: Callable[..., Any]) -> dict[str, Any]:
    try:
        return get_type_hints(fn)
    except Exception:
        return dict(getattr(fn, "__annotations__", {}) or {})


def _strip_optional(ann: Any) -> tuple[Any, bool]:
    origin = get_origin(ann)
    if origin is Union or origin is types.UnionType:
        members = [a for a in get_args(ann) if a is not type(None)]
        nullable = len(members) != len(get_args(ann))
        if len(members) == 1:
            return members[0], nullable
        raise SignatureError(f"union parameter type {ann!r} is ambiguous")
    return ann, False


def _name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", repr(fn))


def _check_return(fn: Callable[..., Any], hints: dict[str, Any], role: Role) -> bool:
    if "return" not in hints:
        return role == "option"
    ret = hints["return"]
    if ret is None or ret is type(None):
        return False
    if ret is bool and role == "option":
        return True
    allowed = "bool or None" if role == "option" else "None"
    raise SignatureError(f"For {_name(fn)}, the return type is not {allowed}")


def _sequence(ann: Any, argument_type: Any) -> tuple[Arity, Any] | None:
    origin = get_origin(ann)
    args = get_args(ann)

    if ann in _TUPLE_ORIGINS or origin in _TUPLE_ORIGINS:
        if args and not (len(args) == 2 and args[1] is Ellipsis):
            raise SignatureError(f"tuple parameter must be homogeneous (tuple[T, ...]), got {ann!r}")
        return Arity.FIXED_SEQUENCE, argument_type or (args[0] if args else None)

    if ann in _LIST_ORIGINS or origin in _LIST_ORIGINS:
        return Arity.VARIABLE_SEQUENCE, argument_type or (args[0] if args else None)

    return None


def classify_signature(
    fn: Callable[..., Any],
    *,
    argument_type: Any = None,
    role: Role = "option",
) -> Signature:
    """Classify ``fn`` into an :class:`Arity` and element type.

    Raises:
        SignatureError: the return annotation, parameter kinds or parameter
            count cannot be handled.
    """

    hints = _hints(fn)
    returns_flag = _check_return(fn, hints, role)

    try:
        params = list(inspect.signature(fn).parameters.values())
    except (TypeError, ValueError) as e:
        raise SignatureError(f"Cannot inspect {_name(fn)}: {e}") from e

    if not params:
        return Signature(Arity.NO_ARGUMENT, returns_flag=returns_flag)
    if len(params) > 1:
        raise SignatureError(f"Method {_name(fn)} has too many arguments")

    p = params[0]
    if p.kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise SignatureError(f"{_name(fn)}: parameter {p.name!r} must be positional")

    ann = hints.get(p.name, p.annotation if p.annotation is not inspect.Parameter.empty else str)
    ann, nullable = _strip_optional(ann)
    accepts_none = nullable or p.default is None

    seq = _sequence(ann, argument_type)
    if seq is not None:
        arity, element = seq
        if element is None:
            raise SignatureError(
                f"{_name(fn)}: cannot determine the element type of {ann!r}; "
                "declare argument_type"
            )
        return Signature(arity, element, returns_flag=returns_flag, accepts_none=accepts_none)

    return Signature(
        Arity.SCALAR,
        argument_type or ann,
        returns_flag=returns_flag,
        accepts_none=accepts_none,
    )
