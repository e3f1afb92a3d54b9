from lease_config import EngineConfig, configure_logging
import logging
import pytest


def test_defaults() -> None:
    config = EngineConfig()
    assert config.currency_precision == 2
    assert config.zero_tolerance == 1e-6
    assert config.default_currency == "NGN"


@pytest.mark.parametrize(
    "kwargs",
    [{"currency_precision": -1}, {"currency_precision": 2.5}, {"zero_tolerance": -0.1}, {"default_currency": ""}],
)
def test_invalid_config(kwargs) -> None:
    with pytest.raises(ValueError):
        EngineConfig(**kwargs)


def test_from_env(monkeypatch) -> None:
    monkeypatch.setenv("IFRS16_CURRENCY_PRECISION", "4")
    monkeypatch.setenv("IFRS16_DEFAULT_CURRENCY", "USD")
    config = EngineConfig.from_env()
    assert config.currency_precision == 4
    assert config.default_currency == "USD"


def test_from_env_defaults(monkeypatch) -> None:
    monkeypatch.delenv("IFRS16_CURRENCY_PRECISION", raising=False)
    monkeypatch.delenv("IFRS16_DEFAULT_CURRENCY", raising=False)
    assert EngineConfig.from_env() == EngineConfig()


def test_configure_logging_is_idempotent() -> None:
    root = logging.getLogger()
    before = len(root.handlers)
    level = root.level
    try:
        configure_logging("WARNING")
        configure_logging("DEBUG")
        assert len(root.handlers) <= before + 1
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(level)
