import pytest

from hr_portal.config import _env_flag


@pytest.mark.parametrize("value", ["1", "true", "True", "yes", "on", " TRUE "])
def test_env_flag_truthy(monkeypatch, value):
    monkeypatch.setenv("SQL_ECHO", value)
    assert _env_flag("SQL_ECHO") is True


@pytest.mark.parametrize("value", ["0", "false", "no", "off", ""])
def test_env_flag_falsy(monkeypatch, value):
    monkeypatch.setenv("SQL_ECHO", value)
    assert _env_flag("SQL_ECHO") is False


def test_env_flag_default(monkeypatch):
    monkeypatch.delenv("SQL_ECHO", raising=False)
    assert _env_flag("SQL_ECHO") is False
    assert _env_flag("SQL_ECHO", "1") is True
