"""Abstract customer directory.

The user directory that owns customers lives outside this package; the
order engine only reads and updates the purchasing counters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from intake.domain.model.customer import Customer


class CustomerRepository(ABC):

    @abstractmethod
    def get_by_id(self, customer_id: str) -> Customer | None:
        """Return a customer by ID, or None if not found."""

    @abstractmethod
    def save(self, customer: Customer) -> None:
        """Persist a new or updated customer."""
