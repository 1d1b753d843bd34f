"""Availability policy: what can still be sold, and how urgently.

Pure functions over a ``StockRecord`` snapshot. The result is recomputed
on every read and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from intake.domain.model.stock import StockRecord


class StockStatus(Enum):
    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    IN_STOCK = "in_stock"


@dataclass(frozen=True)
class Availability:

    product_id: str
    available: int
    status: StockStatus


def available_quantity(record: StockRecord) -> int:
    return max(0, record.quantity - record.reserved - record.safety_buffer)


def stock_status(record: StockRecord) -> StockStatus:
    available = available_quantity(record)
    if available == 0:
        return StockStatus.OUT_OF_STOCK
    if available <= record.low_stock_threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def check_availability(record: StockRecord) -> Availability:
    return Availability(
        product_id=record.product_id,
        available=available_quantity(record),
        status=stock_status(record),
    )
