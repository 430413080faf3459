"""
Outgoing shipment tests: status flow and batch allocation on shipping.
"""

import pytest
from datetime import date

from warehouse_ledger.constants import ShipmentStatus, AllocationStrategy


@pytest.fixture
def wrap(batches):
    product = batches.add_product("SKU-1", "Stretch Wrap", unit_price="9.99", stock=20)
    batches.create_batch(product.id, 20, batch_number="W-1", received_date="2024-01-01")
    return product


@pytest.fixture
def tape(batches):
    return batches.add_product("SKU-2", "Packing Tape", unit_price="3", stock=2)


class TestShipmentFlow:

    def test_create_numbers_and_items(self, shipments, wrap):
        first = shipments.create_shipment("Northwind", [{"product_id": wrap.id, "quantity": 5}])
        second = shipments.create_shipment("Contoso", [{"product_id": wrap.id, "quantity": 1}])
        assert first.shipment_number == "SHP-000001"
        assert second.shipment_number == "SHP-000002"
        assert first.status == ShipmentStatus.PENDING
        assert shipments.get_shipment(first.id).total_units == 5

    def test_invalid_items_rejected(self, shipments, wrap):
        with pytest.raises(ValueError):
            shipments.create_shipment("Northwind", [])
        with pytest.raises(ValueError):
            shipments.create_shipment("Northwind", [{"product_id": wrap.id, "quantity": 0}])
        with pytest.raises(ValueError):
            shipments.create_shipment("Northwind", [{"product_id": 999, "quantity": 1}])

    def test_ship_allocates_from_batches(self, shipments, batches, wrap):
        shipment = shipments.create_shipment("Northwind", [{"product_id": wrap.id, "quantity": 5}])
        with pytest.raises(ValueError):
            shipments.mark_shipped(shipment.id)

        shipments.mark_ready(shipment.id)
        shipped = shipments.mark_shipped(shipment.id, tracking_number="1Z999",
                                         strategy=AllocationStrategy.FIFO, shipped_date=date(2024, 6, 14))

        assert shipped.status == ShipmentStatus.SHIPPED
        assert shipped.shipped_date == date(2024, 6, 14)
        assert batches.get_product(wrap.id).stock == 15
        allocations = batches.get_allocations("SHP-000001")
        assert sum(a.quantity for a in allocations) == 5

        delivered = shipments.mark_delivered(shipment.id, delivered_date="2024-06-16")
        assert delivered.status == ShipmentStatus.DELIVERED
        with pytest.raises(ValueError):
            shipments.cancel_shipment(shipment.id)
        with pytest.raises(ValueError):
            shipments.update_expected_date(shipment.id, "2024-07-01")

    def test_failed_allocation_is_reversed(self, shipments, batches, wrap, tape):
        shipment = shipments.create_shipment("Northwind", [
            {"product_id": wrap.id, "quantity": 5},
            {"product_id": tape.id, "quantity": 10},
        ])
        shipments.mark_ready(shipment.id)
        with pytest.raises(ValueError, match="Insufficient"):
            shipments.mark_shipped(shipment.id)

        assert shipments.get_shipment(shipment.id).status == ShipmentStatus.READY_TO_SHIP
        assert batches.get_product(wrap.id).stock == 20
        assert batches.get_batches(wrap.id)[0].quantity == 20
        assert batches.get_allocations(shipment.shipment_number) == []

    def test_failed_status_write_reverses_allocation(self, shipments, batches, wrap, monkeypatch):
        shipment = shipments.create_shipment("Northwind", [{"product_id": wrap.id, "quantity": 5}])
        shipments.mark_ready(shipment.id)

        def fail_update(entity):
            raise RuntimeError("disk full")

        monkeypatch.setattr(shipments.outgoing_shipments_repository, "update", fail_update)
        with pytest.raises(RuntimeError):
            shipments.mark_shipped(shipment.id, tracking_number="1Z999")
        monkeypatch.undo()

        stored = shipments.get_shipment(shipment.id)
        assert stored.status == ShipmentStatus.READY_TO_SHIP
        assert stored.tracking_number is None
        assert batches.get_product(wrap.id).stock == 20
        assert batches.get_batches(wrap.id)[0].quantity == 20
        assert batches.get_allocations(shipment.shipment_number) == []

    def test_cancel_pending(self, shipments, wrap):
        shipment = shipments.create_shipment("Northwind", [{"product_id": wrap.id, "quantity": 1}])
        assert shipments.update_status(shipment.id, ShipmentStatus.CANCELLED).status == ShipmentStatus.CANCELLED
        with pytest.raises(ValueError):
            shipments.update_status(shipment.id, ShipmentStatus.PENDING)

    def test_update_expected_date(self, shipments, wrap):
        shipment = shipments.create_shipment("Northwind", [{"product_id": wrap.id, "quantity": 1}])
        updated = shipments.update_expected_date(shipment.id, "2024-06-30")
        assert shipments.get_shipment(updated.id).expected_date == date(2024, 6, 30)

    def test_list_and_search(self, shipments, wrap):
        shipments.create_shipment("Northwind", [{"product_id": wrap.id, "quantity": 1}])
        other = shipments.create_shipment("Contoso", [{"product_id": wrap.id, "quantity": 1}])
        shipments.mark_ready(other.id)

        assert [s.customer_name for s in shipments.list_shipments(search="north")] == ["Northwind"]
        ready = shipments.list_shipments(status=ShipmentStatus.READY_TO_SHIP)
        assert [s.shipment_number for s in ready] == [other.shipment_number]
