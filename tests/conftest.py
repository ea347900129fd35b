import pytest


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPTBIND_OUTPUT", raising=False)
    monkeypatch.delenv("OPTBIND_QUIET", raising=False)
