import pytest

from pynes.utils import debug_enabled, debug_log, enabled_categories, reload_categories
from pynes.utils.debug import ENV_VAR


@pytest.fixture(autouse=True)
def _fresh_categories():
    reload_categories()
    yield
    reload_categories()


def test_disabled_without_environment(monkeypatch, capsys):
    monkeypatch.delenv(ENV_VAR, raising=False)
    reload_categories()

    assert not debug_enabled()
    assert not debug_enabled("cpu")
    debug_log("cpu", "hidden")
    assert capsys.readouterr().out == ""


def test_selected_categories(monkeypatch, capsys):
    monkeypatch.setenv(ENV_VAR, "cpu, Cart")
    reload_categories()

    assert debug_enabled("cpu")
    assert debug_enabled("cart")
    assert not debug_enabled("ppu")

    debug_log("cpu", "pc=%04x", 0x8000)
    assert capsys.readouterr().out == "[NES][cpu] pc=8000\n"


def test_all_enables_every_category(monkeypatch):
    monkeypatch.setenv(ENV_VAR, "all")
    reload_categories()

    assert debug_enabled("perf")
    assert debug_enabled("anything")


def test_bad_format_arguments_are_appended(monkeypatch, capsys):
    monkeypatch.setenv(ENV_VAR, "system")
    reload_categories()

    debug_log("system", "value=%d", "text")

    assert capsys.readouterr().out == "[NES][system] value=%d ('text',)\n"


def test_enabled_categories_are_cached_until_reload(monkeypatch):
    monkeypatch.setenv(ENV_VAR, "ppu")
    reload_categories()
    assert enabled_categories() == frozenset({"ppu"})

    monkeypatch.setenv(ENV_VAR, "cpu")
    assert enabled_categories() == frozenset({"ppu"})

    reload_categories()
    assert enabled_categories() == frozenset({"cpu"})
