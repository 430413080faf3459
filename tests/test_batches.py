"""
Batch inventory tests
=====================

Batch quantities against product stock, proportional sync and
FIFO / LIFO / FEFO allocation.
"""

import pytest
from datetime import date

from warehouse_ledger.constants import AllocationStrategy, ExpirationStatus
from warehouse_ledger.business_logic.batch_manager import proportional_split, expiration_status

from .conftest import AS_OF


@pytest.fixture
def product(batches):
    return batches.add_product("SKU-100", "Shrink Wrap", unit_price="12.50", stock=30)


@pytest.fixture
def stocked(batches, product):
    """Three batches: A (Jan, exp Dec), B (Feb, exp Jul), C (Jan 15, expired Jun 1)."""
    a = batches.create_batch(product.id, 10, batch_number="A", received_date="2024-01-01",
                             expiration_date="2024-12-31", location="R1")
    b = batches.create_batch(product.id, 10, batch_number="B", received_date="2024-02-01",
                             expiration_date="2024-07-01", location="R2")
    c = batches.create_batch(product.id, 10, batch_number="C", received_date="2024-01-15",
                             expiration_date="2024-06-01", location="R3")
    return a, b, c


def quantities(batches, product_id):
    return {b.batch_number: b.quantity for b in batches.get_batches(product_id)}


class TestProportionalSplit:

    def test_exact_scale(self):
        assert proportional_split([30, 30, 40], 50) == [15, 15, 20]

    def test_largest_remainder_gets_leftover(self):
        assert proportional_split([10, 20, 30], 7) == [1, 2, 4]

    def test_ties_go_to_earlier_positions(self):
        assert proportional_split([1, 1, 1], 2) == [1, 1, 0]

    def test_zero_total_rejected(self):
        with pytest.raises(ValueError):
            proportional_split([0, 0], 5)


class TestBatches:

    def test_batch_cannot_exceed_available_stock(self, batches, product):
        batches.create_batch(product.id, 25, received_date="2024-01-01")
        with pytest.raises(ValueError, match="exceeds available"):
            batches.create_batch(product.id, 6, received_date="2024-01-02")

    def test_generated_batch_number_and_default_cost(self, batches, product):
        batch = batches.create_batch(product.id, 5, received_date="2024-03-09")
        assert batch.batch_number == f"BATCH-20240309-{product.id}-001"
        assert str(batch.cost_price) == "12.50"

    def test_fractional_quantity_rejected(self, batches, product):
        with pytest.raises(ValueError):
            batches.create_batch(product.id, "2.5")

    def test_update_quantity_checks_other_batches(self, batches, product, stocked):
        a, _, _ = stocked
        with pytest.raises(ValueError):
            batches.update_batch(a.id, quantity=11)
        batches.adjust_stock(product.id, 5)
        assert batches.update_batch(a.id, quantity=15).quantity == 15

    def test_expiration_before_received_rejected(self, batches, product):
        with pytest.raises(ValueError):
            batches.create_batch(product.id, 1, received_date="2024-05-01", expiration_date="2024-04-01")

    def test_consistency_report(self, batches, product):
        batches.create_batch(product.id, 12, received_date="2024-01-01")
        report = batches.check_consistency(product.id)
        assert report["total_in_batches"] == 12
        assert report["unallocated"] == 18
        assert report["is_consistent"] is True

    def test_expiration_status_thresholds(self, stocked):
        a, b, c = stocked
        assert expiration_status(c, AS_OF) == ExpirationStatus.EXPIRED
        assert expiration_status(b, AS_OF) == ExpirationStatus.WARNING
        assert expiration_status(b, date(2024, 6, 25)) == ExpirationStatus.CRITICAL
        assert expiration_status(a, AS_OF) == ExpirationStatus.NORMAL

    def test_expiring_batches(self, batches, stocked):
        rows = batches.get_expiring_batches(within_days=30, as_of=AS_OF)
        assert [row["batch"].batch_number for row in rows] == ["C", "B"]
        assert rows[0]["status"] == ExpirationStatus.EXPIRED


class TestSyncBatchesToStock:

    def test_sum_matches_stock_after_sync(self, batches, product):
        batches.create_batch(product.id, 9, batch_number="X", received_date="2024-01-01")
        batches.create_batch(product.id, 9, batch_number="Y", received_date="2024-01-02")
        batches.create_batch(product.id, 12, batch_number="Z", received_date="2024-01-03")
        batches.adjust_stock(product.id, -23)

        remaining = batches.sync_batches_to_stock(product.id)
        assert sum(b.quantity for b in remaining) == 7
        assert quantities(batches, product.id) == {"X": 2, "Y": 2, "Z": 3}

    def test_emptied_batches_are_removed(self, batches, product):
        batches.create_batch(product.id, 1, batch_number="X", received_date="2024-01-01")
        batches.create_batch(product.id, 1, batch_number="Y", received_date="2024-01-02")
        batches.create_batch(product.id, 1, batch_number="Z", received_date="2024-01-03")
        batches.adjust_stock(product.id, -28)

        batches.sync_batches_to_stock(product.id)
        assert quantities(batches, product.id) == {"X": 1, "Y": 1}

    def test_unbatched_stock_goes_to_default_batch(self, batches, product):
        remaining = batches.sync_batches_to_stock(product.id)
        assert len(remaining) == 1
        assert remaining[0].quantity == 30


class TestAllocation:

    def test_fifo(self, batches, product, stocked):
        results = batches.allocate(product.id, 15, AllocationStrategy.FIFO, order_reference="SO-1", as_of=AS_OF)
        assert [(r["batch_number"], r["allocated_qty"]) for r in results] == [("A", 10), ("C", 5)]
        assert batches.get_product(product.id).stock == 15
        assert quantities(batches, product.id) == {"A": 0, "C": 5, "B": 10}

    def test_lifo(self, batches, product, stocked):
        results = batches.allocate(product.id, 12, "LIFO", as_of=AS_OF)
        assert [(r["batch_number"], r["allocated_qty"]) for r in results] == [("B", 10), ("C", 2)]

    def test_fefo_skips_expired(self, batches, product, stocked):
        results = batches.allocate(product.id, 15, AllocationStrategy.FEFO, as_of=AS_OF)
        assert [(r["batch_number"], r["allocated_qty"]) for r in results] == [("B", 10), ("A", 5)]
        assert quantities(batches, product.id)["C"] == 10

    def test_fefo_cannot_use_expired_stock(self, batches, product, stocked):
        with pytest.raises(ValueError, match="Insufficient"):
            batches.allocate(product.id, 25, AllocationStrategy.FEFO, as_of=AS_OF)
        assert batches.get_product(product.id).stock == 30

    def test_unknown_strategy_rejected(self, batches, product, stocked):
        with pytest.raises(ValueError):
            batches.allocate(product.id, 1, "RANDOM")

    def test_unbatched_stock_is_batched_on_demand(self, batches, product):
        results = batches.allocate(product.id, 4, order_reference="SO-9", as_of=AS_OF)
        assert len(results) == 1
        assert results[0]["allocated_qty"] == 4
        assert sum(quantities(batches, product.id).values()) == 26
        assert batches.get_product(product.id).stock == 26

    def test_reverse_allocation(self, batches, product, stocked):
        batches.allocate(product.id, 15, order_reference="SO-1", as_of=AS_OF)
        assert len(batches.get_allocations("SO-1")) == 2

        assert batches.reverse_allocation("SO-1") == 15
        assert batches.get_allocations("SO-1") == []
        assert batches.get_product(product.id).stock == 30
        assert quantities(batches, product.id) == {"A": 10, "C": 10, "B": 10}

    def test_reverse_allocation_requires_reference(self, batches, product, stocked):
        batches.allocate(product.id, 5, as_of=AS_OF)
        batches.allocate(product.id, 3, order_reference="  ", as_of=AS_OF)
        batches.allocate(product.id, 2, order_reference="SO-2", as_of=AS_OF)

        for reference in (None, "", "   "):
            with pytest.raises(ValueError, match="order reference"):
                batches.reverse_allocation(reference)
        assert batches.get_product(product.id).stock == 20

        assert batches.reverse_allocation("SO-2") == 2
        assert batches.get_product(product.id).stock == 22
