"""Unit tests for environment configuration"""

import pytest

from mercadopago_mcp.config import ConfigError, Environment, load_config
from mercadopago_mcp.server import main


def test_defaults():
    config = load_config({"MERCADOPAGO_ACCESS_TOKEN": "TEST-123"})

    assert config.access_token == "TEST-123"
    assert config.environment is Environment.SANDBOX
    assert config.timeout == 5.0
    assert config.log_level == "INFO"
    assert config.otel_enabled is False


def test_all_values_from_environment():
    config = load_config({
        "MERCADOPAGO_ACCESS_TOKEN": "APP_USR-1",
        "MERCADOPAGO_ENVIRONMENT": "Production",
        "MERCADOPAGO_TIMEOUT": "12.5",
        "LOG_LEVEL": "debug",
        "OTEL_ENABLED": "true",
    })

    assert config.environment is Environment.PRODUCTION
    assert config.timeout == 12.5
    assert config.log_level == "DEBUG"
    assert config.otel_enabled is True


@pytest.mark.parametrize("environ", [{}, {"MERCADOPAGO_ACCESS_TOKEN": ""}])
def test_missing_token_is_fatal(environ):
    with pytest.raises(ConfigError, match="MERCADOPAGO_ACCESS_TOKEN"):
        load_config(environ)


@pytest.mark.parametrize("name,value", [
    ("MERCADOPAGO_ENVIRONMENT", "staging"),
    ("MERCADOPAGO_TIMEOUT", "-1"),
    ("MERCADOPAGO_TIMEOUT", "soon"),
    ("LOG_LEVEL", "CHATTY"),
    ("OTEL_ENABLED", "maybe"),
])
def test_invalid_values_name_the_variable(name, value):
    with pytest.raises(ConfigError, match=name):
        load_config({"MERCADOPAGO_ACCESS_TOKEN": "TEST-123", name: value})


def test_entry_point_exits_with_status_one_without_token(monkeypatch, capsys):
    monkeypatch.delenv("MERCADOPAGO_ACCESS_TOKEN", raising=False)

    with pytest.raises(SystemExit) as exc_info:
        main()

    assert exc_info.value.code == 1
    captured = capsys.readouterr()
    assert "MERCADOPAGO_ACCESS_TOKEN" in captured.err
    assert captured.out == ""
