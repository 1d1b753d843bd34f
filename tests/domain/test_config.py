"""Unit tests for Settings and environment overrides."""

from pathlib import Path

import pytest

from intake.config import Settings
from intake.domain.exceptions import ValidationError
from intake.domain.model.value_objects import Money


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.store_open_hour == 8
        assert settings.store_close_hour == 17
        assert settings.max_daily_orders == 20
        assert settings.delivery_fee == Money.of("50")
        assert settings.cod_surcharge == Money.of("30")
        assert settings.min_gcash_orders_for_cod == 5

    def test_env_overrides(self, tmp_path):
        settings = Settings.from_env(
            {
                "MAX_DAILY_ORDERS": "35",
                "DELIVERY_FEE": "75.50",
                "INTAKE_DATA_DIR": str(tmp_path),
                "STORE_OPEN_HOUR": " ",
            }
        )
        assert settings.max_daily_orders == 35
        assert settings.delivery_fee == Money.of("75.50")
        assert settings.data_dir == Path(tmp_path)
        assert settings.store_open_hour == 8

    def test_bad_integer_rejected(self):
        with pytest.raises(ValidationError, match="MAX_DAILY_ORDERS must be an integer"):
            Settings.from_env({"MAX_DAILY_ORDERS": "lots"})

    def test_inverted_hours_rejected(self):
        with pytest.raises(ValidationError, match="Invalid store hours"):
            Settings(store_open_hour=18, store_close_hour=9)

    def test_business_hours_view(self):
        hours = Settings(closed_weekday=0).business_hours
        assert hours.closed_weekday == 0
        assert (hours.open_hour, hours.close_hour) == (8, 17)
