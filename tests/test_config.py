import logging
import os

import pytest

from config import DEFAULT_SECRET_KEY, Settings, check_settings, load_settings, setup_logging


def test_defaults_when_env_is_empty(monkeypatch):
    for var in ("ENV", "STORAGE_BACKEND", "AUTH_TIMEOUT", "ALLOWED_ROLES", "TIMEZONE", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)

    settings = load_settings()

    assert settings.env == Settings().env == "prod"
    assert settings.storage_backend == "file"
    assert settings.auth_timeout == 10
    assert settings.allowed_roles == ("admin", "manager", "coordinator")
    assert settings.timezone == "America/Sao_Paulo"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("ENV", "DEV")
    monkeypatch.setenv("STORAGE_BACKEND", " SQL ")
    monkeypatch.setenv("AUTH_TIMEOUT", "3")
    monkeypatch.setenv("ALLOWED_ROLES", "admin, auditor,")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.env == "dev"
    assert settings.storage_backend == "sql"
    assert settings.auth_timeout == 3
    assert settings.allowed_roles == ("admin", "auditor")
    assert settings.log_level == "DEBUG"


def test_invalid_int_falls_back(monkeypatch):
    monkeypatch.setenv("AUTH_TIMEOUT", "soon")
    assert load_settings().auth_timeout == 10


def test_setup_logging_sets_level():
    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING
    setup_logging("INFO")


@pytest.mark.parametrize("env", ["prod", "staging"])
def test_default_secret_key_outside_dev_is_reported(caplog, env):
    with caplog.at_level(logging.WARNING, logger="config"):
        ok = check_settings(Settings(env=env, secret_key=DEFAULT_SECRET_KEY))

    assert not ok
    assert "SECRET_KEY" in caplog.text


@pytest.mark.parametrize("settings", [
    Settings(env="dev"),
    Settings(env="prod", secret_key="uma-chave-forte"),
])
def test_check_settings_accepts_dev_or_custom_key(caplog, settings):
    with caplog.at_level(logging.WARNING, logger="config"):
        assert check_settings(settings)

    assert caplog.records == []


def test_env_example_ships_prod_mode():
    path = os.path.join(os.path.dirname(__file__), "..", ".env.example")
    with open(path, encoding="utf-8") as f:
        lines = [line.strip() for line in f]

    assert "ENV=prod" in lines
    assert "ENV=dev" not in lines
