from __future__ import annotations

from datetime import date

import pytest

from pdf_invoicer.data.models import Address, Client, Invoice, Issuer, LineItem


@pytest.fixture
def address() -> Address:
    return Address(street="Main", street_number="12", zip_code="08001", city="Barcelona", country="Spain")


@pytest.fixture
def issuer() -> Issuer:
    return Issuer(
        name="Sample Studio SL",
        address=Address("Carrer de Mallorca", "401", "08013", "Barcelona", "Spain", floor="3", door="2"),
        tax_id="B12345678",
        iban="ES91 2100 0418 4502 0005 1332",
        email="billing@sample.example",
    )


@pytest.fixture
def client(address: Address) -> Client:
    return Client(name="Client Corp", address=address, tax_id="A87654321")


@pytest.fixture
def make_invoice(issuer: Issuer, client: Client):
    """Factory for a valid invoice; keyword arguments override any field."""

    def _make(**overrides) -> Invoice:
        fields = dict(
            number="INV-0001",
            emit_date=date(2024, 3, 1),
            op_date=date(2024, 3, 1),
            due_date=date(2024, 3, 31),
            issuer=issuer,
            client=client,
            items=[LineItem("Consulting", 10, 50.0, 0.21)],
        )
        fields.update(overrides)
        return Invoice(**fields)

    return _make
