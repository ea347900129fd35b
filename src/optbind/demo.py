"""Example application wired as the ``optbind-demo`` console script."""

from enum import Enum
from typing import Optional

import click

from . import __version__
from .app import CommandLineApplication
from .cli import main as cli_main
from .core.dispatch import entry_point, option
from .core.errors import ApplicationError


class Case(str, Enum):
    UPPER = "upper"
    LOWER = "lower"
    KEEP = "keep"


class Greeter(CommandLineApplication):
    prog_name = "optbind-demo"

    def __init__(self) -> None:
        self.repeat = 1
        self.case = Case.KEEP
        self.tags: list[str] = []
        self.greeting = "Hello"

    @option("V", "version", usage="Print the version and exit")
    def version(self) -> bool:
        click.echo(f"optbind-demo {__version__}")
        return False

    @option("h", "help", usage="Show this message and exit")
    def help(self) -> bool:
        self.print_usage("optbind-demo", "Greet everyone named on the command line.")
        return False

    @option("n", "repeat", usage="Number of times to greet each name")
    def set_repeat(self, count: int) -> None:
        if count < 1:
            raise ApplicationError(f"repeat must be positive, got {count}")
        self.repeat = count

    @option("c", "case", usage="Letter case of the output (upper, lower, keep)")
    def set_case(self, case: Case) -> None:
        self.case = case

    @option("t", "tags", usage="Comma separated tags appended to each line",
            argument_type=str, maximum_argument_count=5)
    def set_tags(self, tags: list) -> None:
        self.tags = tags

    @option("g", "greeting", usage="Greeting word, bare -g resets it to Hello",
            optional_argument=True)
    def set_greeting(self, word: Optional[str]) -> None:
        self.greeting = word or "Hello"

    @entry_point(metavar="NAME")
    def greet(self, names: tuple[str, ...]) -> None:
        for name in names or ("world",):
            line = f"{self.greeting}, {name}!"
            if self.tags:
                line += " [" + ", ".join(self.tags) + "]"
            if self.case is Case.UPPER:
                line = line.upper()
            elif self.case is Case.LOWER:
                line = line.lower()
            for _ in range(self.repeat):
                click.echo(line)


def main() -> int:
    return cli_main(Greeter())


if __name__ == "__main__":
    raise SystemExit(main())
