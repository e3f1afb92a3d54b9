# lease_config.py

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_configured = False


@dataclass(frozen=True)
class EngineConfig:
    """Settings shared by the calculation engine and its import/export helpers."""

    # Decimal places every currency amount is rounded to
    currency_precision: int = 2

    # Largest residual balance still treated as zero by the QA checks
    zero_tolerance: float = 1e-6

    default_currency: str = "NGN"

    def __post_init__(self):
        if isinstance(self.currency_precision, bool) or not isinstance(self.currency_precision, int):
            raise ValueError("currency_precision must be a whole number")
        if self.currency_precision < 0:
            raise ValueError("currency_precision cannot be negative")
        if self.zero_tolerance < 0:
            raise ValueError("zero_tolerance cannot be negative")
        if not self.default_currency:
            raise ValueError("default_currency is required")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        precision = os.environ.get("IFRS16_CURRENCY_PRECISION")
        currency = os.environ.get("IFRS16_DEFAULT_CURRENCY")
        config = cls(
            currency_precision=int(precision) if precision else cls.currency_precision,
            default_currency=currency or cls.default_currency,
        )
        logger.debug("engine config loaded: %s", config)
        return config


DEFAULT_CONFIG = EngineConfig()


def configure_logging(level=None) -> None:
    """Attach a stderr handler to the root logger once; later calls only adjust the level."""
    global _configured
    if level is None:
        level = os.environ.get("IFRS16_LOG_LEVEL", "INFO").upper()
    root = logging.getLogger()
    root.setLevel(level)
    if _configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    _configured = True
