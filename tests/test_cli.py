import json

import pytest

from optbind import CommandLineApplication, ConverterRegistry, ErrorCode, entry_point, option
from optbind.cli import main, run
from optbind.demo import Greeter


class Tool:
    def __init__(self) -> None:
        self.args: tuple[str, ...] | None = None

    @option("x", "explode", usage="Raise from a handler")
    def explode(self) -> None:
        raise RuntimeError("boom")

    @option("n", "count", usage="A number")
    def count(self, value: int) -> None:
        self.count_value = value

    @entry_point()
    def run(self, args: tuple[str, ...]) -> None:
        self.args = args


class Broken:
    @option("a", usage="Too many parameters")
    def bad(self, a: str, b: str) -> None:
        pass

    @entry_point()
    def run(self, args: tuple[str, ...]) -> None:
        pass


def test_successful_run_records_dispatch() -> None:
    tool = Tool()
    results, code = run(tool, ["-n", "3", "file"])

    assert code == 0
    assert results.ok is True
    assert tool.args == ("file",)
    (event,) = results.events
    assert event["kind"] == "run"
    assert event["details"] == {"options": ["count"], "entry_point": True}


@pytest.mark.parametrize(
    "app, argv, expected_code, error_code",
    [
        (Tool(), ["--nope"], 1, ErrorCode.E_INPUT_INVALID),
        (Tool(), ["-n", "three"], 1, ErrorCode.E_INPUT_CONVERSION),
        (Tool(), ["-x"], 70, ErrorCode.E_HANDLER_FAILED),
        (Broken(), [], 2, ErrorCode.E_SCHEMA_INVALID),
    ],
)
def test_failures_map_to_exit_codes(app, argv, expected_code, error_code, capsys) -> None:
    results, code = run(app, argv)

    assert code == expected_code
    assert results.ok is False
    assert results.events[0]["code_num"] == int(error_code)
    err = capsys.readouterr().err
    assert f"{error_code.name}:{int(error_code)}" in err


def test_json_output_from_environment(monkeypatch, capsys) -> None:
    monkeypatch.setenv("OPTBIND_OUTPUT", "json")

    _, code = run(Tool(), ["-n", "three"])

    assert code == 1
    payload = json.loads(capsys.readouterr().err.strip())
    assert payload["ok"] is False
    event = payload["events"][0]
    assert event["details"]["kind"] == "conversion"
    assert event["details"]["token"] == "three"
    assert event["details"]["target_type"] == "int"


def test_quiet_suppresses_rendering(monkeypatch, capsys) -> None:
    monkeypatch.setenv("OPTBIND_QUIET", "1")

    _, code = run(Tool(), ["--nope"])

    assert code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_handler_failure_carries_cause(capsys) -> None:
    results, _ = run(Tool(), ["-x"], output="json")
    details = results.events[0]["details"]
    assert details["handler"] == "explode"
    assert "boom" in details["cause"]


def test_demo_greets(capsys) -> None:
    assert main(Greeter(), ["-n", "2", "--case", "upper", "Ada"]) == 0
    assert capsys.readouterr().out.splitlines() == ["HELLO, ADA!", "HELLO, ADA!"]


def test_demo_tags_and_greeting(capsys) -> None:
    assert main(Greeter(), ["--greeting=Hi", "-t", "a,b", "Bob", "Eve"]) == 0
    assert capsys.readouterr().out.splitlines() == ["Hi, Bob! [a, b]", "Hi, Eve! [a, b]"]


def test_demo_version_skips_greeting(capsys) -> None:
    assert main(Greeter(), ["-V", "Ada"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("optbind-demo ")
    assert "Ada" not in out


def test_demo_help_lists_options(capsys) -> None:
    assert main(Greeter(), ["--help"]) == 0
    out = capsys.readouterr().out
    assert "Greet everyone named on the command line." in out
    for flag in ("--version", "--repeat", "--case", "--tags", "--greeting"):
        assert flag in out
    assert out.index("--version") < out.index("--repeat") < out.index("--greeting")


def test_demo_rejects_non_positive_repeat(capsys) -> None:
    assert main(Greeter(), ["-n", "0", "Ada"]) == 70
    assert "repeat must be positive" in capsys.readouterr().err


class Celsius:
    def __init__(self, degrees: float) -> None:
        self.degrees = degrees


def _celsius_registry() -> ConverterRegistry:
    registry = ConverterRegistry()
    registry.register(Celsius, lambda text: Celsius(float(text)))
    return registry


class Thermostat(CommandLineApplication):
    registry = _celsius_registry()
    prog_name = "thermostat"

    @option("t", usage="Target temperature")
    def target(self, value: Celsius) -> None:
        self.value = value

    @entry_point()
    def main(self, args: tuple[str, ...]) -> None:
        self.args = args


def test_application_registry_is_used_by_run() -> None:
    app = Thermostat()
    results, code = run(app, ["-t", "21.5", "hall"])

    assert code == 0
    assert app.value.degrees == 21.5
    assert app.args == ("hall",)


def test_plain_application_registry_attribute_is_used() -> None:
    class Plain:
        registry = _celsius_registry()

        @option("t", usage="Target temperature")
        def target(self, value: Celsius) -> None:
            self.value = value

        @entry_point()
        def main(self, args: tuple[str, ...]) -> None:
            pass

    app = Plain()
    _, code = run(app, ["-t", "18"])
    assert code == 0
    assert app.value.degrees == 18.0
