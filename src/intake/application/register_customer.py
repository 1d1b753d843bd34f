"""Application service: register a customer with the order engine.

The real user directory lives elsewhere; this only creates the purchasing
counters the engine reads.
"""

from __future__ import annotations

from intake.domain.exceptions import CustomerNotFoundError, ValidationError
from intake.domain.model.customer import Customer
from intake.domain.repository.customer_repository import CustomerRepository


class RegisterCustomerHandler:

    def __init__(self, customer_repo: CustomerRepository) -> None:
        self._customer_repo = customer_repo

    def handle(self, customer_id: str, name: str = "", cod_eligible: bool = False) -> Customer:
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer ID is required")
        if self._customer_repo.get_by_id(customer_id.strip()) is not None:
            raise ValidationError(f"Customer '{customer_id}' already exists")

        customer = Customer(id=customer_id.strip(), name=name.strip(), cod_eligible=cod_eligible)
        self._customer_repo.save(customer)
        return customer


class ShowCustomerHandler:

    def __init__(self, customer_repo: CustomerRepository) -> None:
        self._customer_repo = customer_repo

    def handle(self, customer_id: str) -> Customer:
        customer = self._customer_repo.get_by_id(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer
