"""Unit tests for StockRecord and the availability policy."""

import pytest

from intake.domain.exceptions import ValidationError
from intake.domain.model.stock import StockRecord
from intake.domain.service.availability import (
    StockStatus,
    available_quantity,
    check_availability,
)


class TestStockRecord:

    def test_reserved_above_quantity_rejected(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            StockRecord(product_id="1", quantity=2, reserved=3)

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            StockRecord(product_id="1", quantity=-1)

    def test_negative_buffer_rejected(self):
        with pytest.raises(ValidationError, match="Safety buffer"):
            StockRecord(product_id="1", quantity=1, safety_buffer=-1)

    def test_evolve_bumps_version(self):
        record = StockRecord(product_id="1", quantity=10)
        nxt = record.evolve(reserved=4)
        assert nxt.version == 1
        assert nxt.reserved == 4
        assert record.reserved == 0  # original untouched


class TestAvailability:

    def test_available_subtracts_reserved_and_buffer(self):
        record = StockRecord(product_id="1", quantity=10, reserved=3, safety_buffer=2)
        assert available_quantity(record) == 5

    def test_available_never_negative(self):
        record = StockRecord(product_id="1", quantity=3, reserved=2, safety_buffer=2)
        assert available_quantity(record) == 0

    def test_out_of_stock(self):
        record = StockRecord(product_id="1", quantity=2, safety_buffer=2)
        assert check_availability(record).status is StockStatus.OUT_OF_STOCK

    def test_low_stock_at_threshold(self):
        record = StockRecord(product_id="1", quantity=5, safety_buffer=2, low_stock_threshold=3)
        result = check_availability(record)
        assert result.available == 3
        assert result.status is StockStatus.LOW_STOCK

    def test_in_stock_above_threshold(self):
        record = StockRecord(product_id="1", quantity=6, safety_buffer=2, low_stock_threshold=3)
        assert check_availability(record).status is StockStatus.IN_STOCK
