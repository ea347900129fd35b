"""Process-boundary defaults read from the environment."""

import os
from dataclasses import dataclass

OUTPUT_FORMATS = ("text", "json")


def _env_flag(name: str, default: bool = False) -> bool:
    """Read boolean env flag."""
    val = os.environ.get(name, "").strip().lower()
    if not val:
        return default
    return val in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    output: str = "text"
    quiet: bool = False


def load_settings() -> Settings:
    # OPTBIND_OUTPUT: text | json; anything else falls back to text
    output = os.environ.get("OPTBIND_OUTPUT", "text").strip().lower()
    if output not in OUTPUT_FORMATS:
        output = "text"
    return Settings(output=output, quiet=_env_flag("OPTBIND_QUIET"))
