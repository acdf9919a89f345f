from __future__ import annotations

from decimal import Decimal

import pytest

from recordbook.domain.errors import (
    DuplicateKeyError,
    InsufficientStockError,
    RecordNotFoundError,
    RecordValidationError,
)
from recordbook.domain.models import Incident, Product, Resident
from recordbook.stores import MemoryRecordStore, RecordStore, RecordView

EXPECTED_REMAINING_STOCK = 2


def _names(records) -> list[str]:
    return [record.name for record in records]


def test_memory_store_satisfies_protocol(product_store: MemoryRecordStore) -> None:
    assert isinstance(product_store, RecordStore)


class TestInsert:
    """Key uniqueness on insert."""

    def test_duplicate_key_is_rejected_and_store_unchanged(self, product_store, laptop):
        product_store.insert(laptop)
        before = list(product_store.all())

        with pytest.raises(DuplicateKeyError) as excinfo:
            product_store.insert(laptop.model_copy(update={"category": "Computers"}))

        assert excinfo.value.key == "Laptop"
        assert product_store.size() == 1
        assert list(product_store.all()) == before

    def test_key_comparison_is_case_sensitive(self, product_store, laptop):
        product_store.insert(laptop)
        product_store.insert(laptop.model_copy(update={"name": "laptop"}))

        assert _names(product_store.all()) == ["Laptop", "laptop"]

    def test_incidents_have_no_unique_key(self, incident_store):
        incident = Incident(type="Fire", location="Purok 1", date="2024-05-01", time="13:45")
        incident_store.insert(incident)
        incident_store.insert(incident)

        assert incident_store.size() == 2

    def test_size_tracks_inserts_minus_successful_deletes(self, resident_store):
        for name in ("Ana", "Ben", "Cris", "Dan"):
            resident_store.insert(Resident(name=name, address="Rizal Ave.", contact="0917"))
        resident_store.delete("Ben")
        with pytest.raises(RecordNotFoundError):
            resident_store.delete("Ben")
        resident_store.delete("Dan")

        assert resident_store.size() == 2
        assert len(resident_store) == 2


class TestLookup:
    def test_find_by_key_exact_match(self, seeded_residents):
        assert seeded_residents.find_by_key("Ana").name == "Ana"
        assert seeded_residents.find_by_key("ana") is None

    def test_incident_key_matches_type_or_location_first_in_order(self, incident_store):
        first = Incident(type="Flood", location="Purok 2", date="2024-06-01", time="08:00")
        second = Incident(type="Theft", location="Flood", date="2024-06-02", time="09:00")
        incident_store.insert(first)
        incident_store.insert(second)

        assert incident_store.find_by_key("Flood") == first
        assert incident_store.find_by_key("Purok 2") == first
        assert incident_store.find_by_key("Theft") == second

    def test_substring_search_is_case_sensitive_by_default(self, seeded_residents):
        assert _names(seeded_residents.find_by_substring("An")) == ["Ana", "Anabelle"]
        assert _names(seeded_residents.find_by_substring("an")) == []

    def test_substring_search_case_insensitive(self, seeded_residents):
        found = seeded_residents.find_by_substring("an", case_sensitive=False)

        assert _names(found) == ["Ana", "Anabelle"]

    def test_substring_search_over_several_fields(self, incident_store):
        incident_store.insert(
            Incident(type="Noise", location="Basketball Court", date="2024-01-01", time="22:00")
        )
        incident_store.insert(
            Incident(type="Court dispute", location="Hall", date="2024-01-02", time="10:00")
        )
        incident_store.insert(
            Incident(type="Fire", location="Market", date="2024-01-03", time="11:00")
        )

        found = incident_store.find_by_substring("Court")

        assert [incident.type for incident in found] == ["Noise", "Court dispute"]

    def test_unknown_search_field_is_rejected(self, seeded_residents):
        with pytest.raises(RecordValidationError):
            seeded_residents.find_by_substring("x", fields=["nickname"])

    def test_views_are_restartable_and_lazy(self, seeded_residents):
        view = seeded_residents.find_by_substring("An")

        assert isinstance(view, RecordView)
        assert list(view) == list(view)

        seeded_residents.insert(Resident(name="Andres", address="Luna St.", contact="0918"))
        assert _names(view) == ["Ana", "Anabelle", "Andres"]

    def test_filter_keeps_store_order(self, seeded_products):
        low = seeded_products.filter(lambda product: product.quantity < 5)

        assert _names(low) == ["B", "C"]


class TestUpdate:
    def test_partial_update_replaces_only_supplied_fields(self, seeded_residents):
        updated = seeded_residents.update("Ben", {"name": "", "address": None, "contact": "0999"})

        assert updated == Resident(name="Ben", address="Mabini St.", contact="0999")
        assert _names(seeded_residents.all()) == ["Ana", "Ben", "Anabelle"]

    def test_all_empty_update_is_a_noop(self, seeded_residents):
        before = list(seeded_residents.all())

        result = seeded_residents.update("Ana", {"name": "", "address": "   ", "contact": None})

        assert result == before[0]
        assert list(seeded_residents.all()) == before

    def test_update_unknown_key_raises_not_found(self, seeded_residents):
        with pytest.raises(RecordNotFoundError):
            seeded_residents.update("Zed", {"contact": "0900"})

    def test_all_empty_update_of_unknown_key_still_not_found(self, seeded_residents):
        with pytest.raises(RecordNotFoundError):
            seeded_residents.update("Zed", {})

    def test_rename_onto_live_key_is_rejected(self, seeded_residents):
        with pytest.raises(DuplicateKeyError):
            seeded_residents.update("Ben", {"name": "Ana"})

        assert _names(seeded_residents.all()) == ["Ana", "Ben", "Anabelle"]

    def test_rename_keeps_position(self, seeded_residents):
        seeded_residents.update("Ben", {"name": "Benito"})

        assert _names(seeded_residents.all()) == ["Ana", "Benito", "Anabelle"]

    def test_update_result_is_validated(self, seeded_products):
        with pytest.raises(RecordValidationError):
            seeded_products.update("A", {"quantity": -1})

        assert seeded_products.find_by_key("A").quantity == 10

    def test_update_rejects_unknown_fields(self, seeded_products):
        with pytest.raises(RecordValidationError):
            seeded_products.update("A", {"colour": "red"})


class TestDelete:
    def test_delete_does_not_reorder(self, seeded_products):
        removed = seeded_products.delete("B")

        assert removed.name == "B"
        assert _names(seeded_products.all()) == ["A", "C"]

    def test_incident_delete_removes_first_match_only(self, incident_store):
        for day in ("01", "02"):
            incident_store.insert(
                Incident(type="Fire", location="Market", date=f"2024-03-{day}", time="10:00")
            )

        removed = incident_store.delete("Market")

        assert removed.date == "2024-03-01"
        assert [incident.date for incident in incident_store.all()] == ["2024-03-02"]


class TestAdjustQuantity:
    def test_sale_then_oversell(self, product_store):
        product_store.insert(
            Product(name="Widget", category="Parts", quantity=5, price=Decimal("2.50"))
        )

        assert product_store.adjust_quantity("Widget", -3) == EXPECTED_REMAINING_STOCK

        with pytest.raises(InsufficientStockError) as excinfo:
            product_store.adjust_quantity("Widget", -3)

        assert excinfo.value.available == EXPECTED_REMAINING_STOCK
        assert excinfo.value.requested == 3
        assert product_store.find_by_key("Widget").quantity == EXPECTED_REMAINING_STOCK

    def test_stock_can_reach_zero(self, seeded_products):
        assert seeded_products.adjust_quantity("B", -3) == 0

    def test_unknown_product(self, seeded_products):
        with pytest.raises(RecordNotFoundError):
            seeded_products.adjust_quantity("Z", -1)

    def test_collection_without_quantity(self, seeded_residents):
        with pytest.raises(RecordValidationError):
            seeded_residents.adjust_quantity("Ana", -1)
