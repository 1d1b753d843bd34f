"""Runtime settings.

Defaults match the store's production configuration. ``Settings.from_env``
lets each value be overridden through an environment variable; nothing
else in the package reads the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from decimal import Decimal
from pathlib import Path
from typing import Mapping

from intake.domain.exceptions import ValidationError
from intake.domain.model.value_objects import Money
from intake.domain.service.business_hours import BusinessHours

# Project root when installed in editable mode.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"

_ENV_NAMES = {
    "store_open_hour": "STORE_OPEN_HOUR",
    "store_close_hour": "STORE_CLOSE_HOUR",
    "closed_weekday": "CLOSED_WEEKDAY",
    "max_daily_orders": "MAX_DAILY_ORDERS",
    "delivery_fee": "DELIVERY_FEE",
    "cod_surcharge": "COD_SURCHARGE",
    "sensitive_price_threshold": "SENSITIVE_PRODUCT_PRICE_THRESHOLD",
    "high_value_threshold": "HIGH_VALUE_ORDER_THRESHOLD",
    "min_gcash_orders_for_cod": "MIN_GCASH_ORDERS_FOR_COD",
    "low_stock_threshold": "LOW_STOCK_THRESHOLD",
    "safety_buffer": "SAFETY_BUFFER",
    "auto_confirm_delay_hours": "AUTO_CONFIRM_DELAY_HOURS",
    "auto_confirm_offset_hours": "AUTO_CONFIRM_OFFSET_HOURS",
    "max_delivery_attempts": "MAX_DELIVERY_ATTEMPTS",
    "stock_retry_limit": "STOCK_RETRY_LIMIT",
    "data_dir": "INTAKE_DATA_DIR",
}


@dataclass(frozen=True)
class Settings:

    store_open_hour: int = 8
    store_close_hour: int = 17
    closed_weekday: int = 6  # Sunday, as in date.weekday()
    max_daily_orders: int = 20
    delivery_fee: Money = Money(Decimal("50"))
    cod_surcharge: Money = Money(Decimal("30"))
    sensitive_price_threshold: Money = Money(Decimal("300"))
    high_value_threshold: Money = Money(Decimal("3000"))
    min_gcash_orders_for_cod: int = 5
    low_stock_threshold: int = 3
    safety_buffer: int = 2
    auto_confirm_delay_hours: int = 6
    auto_confirm_offset_hours: int = 4
    max_delivery_attempts: int = 2
    stock_retry_limit: int = 8
    data_dir: Path = field(default=_DEFAULT_DATA_DIR)

    def __post_init__(self) -> None:
        if not 0 <= self.store_open_hour < self.store_close_hour <= 24:
            raise ValidationError(
                f"Invalid store hours {self.store_open_hour}-{self.store_close_hour}"
            )
        if not 0 <= self.closed_weekday <= 6:
            raise ValidationError(f"Invalid closed weekday {self.closed_weekday}")
        if self.max_delivery_attempts < 1:
            raise ValidationError("max_delivery_attempts must be at least 1")
        if self.stock_retry_limit < 1:
            raise ValidationError("stock_retry_limit must be at least 1")

    @property
    def business_hours(self) -> BusinessHours:
        return BusinessHours(
            open_hour=self.store_open_hour,
            close_hour=self.store_close_hour,
            closed_weekday=self.closed_weekday,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings, taking overrides from *environ* (default ``os.environ``)."""
        environ = os.environ if environ is None else environ
        overrides: dict[str, object] = {}
        for f in fields(cls):
            raw = environ.get(_ENV_NAMES[f.name])
            if raw is None or raw.strip() == "":
                continue
            overrides[f.name] = _coerce(f.name, _ENV_NAMES[f.name], raw.strip(), f.default)
        return cls(**overrides)


def _coerce(name: str, env_name: str, raw: str, default: object) -> object:
    if isinstance(default, Path):
        return Path(raw)
    if isinstance(default, Money):
        return Money.of(raw)
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(
            f"{env_name} must be an integer for setting '{name}', got {raw!r}"
        ) from exc
