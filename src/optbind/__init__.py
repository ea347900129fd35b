"""Bind decorated handler methods to a click-parsed command line."""

__version__ = "0.1.0"

from .app import CommandLineApplication, parse_and_run, usage_text
from .core.arity import Arity, Signature, classify_signature
from .core.conversion import ConverterRegistry, HandlerBinding, default_registry, invoke_binding
from .core.dispatch import EntryPointMeta, OptionMeta, entry_point, option
from .core.engine import DispatchEngine, RunState
from .core.errors import (
    ApplicationError,
    DispatchError,
    DispatchFailure,
    ErrorCode,
    OptBindError,
    SchemaError,
    SignatureError,
)
from .core.schema import EntryPointDescriptor, OptionDescriptor, Schema, SchemaBuilder, build_schema

__all__ = [
    "__version__",
    "Arity",
    "ApplicationError",
    "CommandLineApplication",
    "ConverterRegistry",
    "DispatchEngine",
    "DispatchError",
    "DispatchFailure",
    "EntryPointDescriptor",
    "EntryPointMeta",
    "ErrorCode",
    "HandlerBinding",
    "OptBindError",
    "OptionDescriptor",
    "OptionMeta",
    "RunState",
    "Schema",
    "SchemaBuilder",
    "SchemaError",
    "Signature",
    "SignatureError",
    "build_schema",
    "classify_signature",
    "default_registry",
    "entry_point",
    "invoke_binding",
    "option",
    "parse_and_run",
    "usage_text",
]
