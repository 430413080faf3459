# warehouse_ledger/business_logic/shipment_manager.py

import logging
from typing import Optional, List, Dict, Any, Union, TYPE_CHECKING
from datetime import date

from warehouse_ledger.business_logic.entities.outgoing_shipment_entity import OutgoingShipmentEntity
from warehouse_ledger.business_logic.entities.shipment_item_entity import ShipmentItemEntity
from warehouse_ledger.business_logic.batch_manager import BatchManager
from warehouse_ledger.constants import ShipmentStatus, SHIPMENT_TRANSITIONS, AllocationStrategy
from warehouse_ledger.utils.date_converter import to_date

if TYPE_CHECKING:
    from warehouse_ledger.data_access.outgoing_shipments_repository import OutgoingShipmentsRepository
    from warehouse_ledger.data_access.shipment_items_repository import ShipmentItemsRepository

logger = logging.getLogger(__name__)

SHIPMENT_NUMBER_PREFIX = "SHP-"


class ShipmentManager:
    def __init__(self,
                 outgoing_shipments_repository: 'OutgoingShipmentsRepository',
                 shipment_items_repository: 'ShipmentItemsRepository',
                 batch_manager: BatchManager):
        if outgoing_shipments_repository is None: raise ValueError("outgoing_shipments_repository cannot be None")
        if shipment_items_repository is None: raise ValueError("shipment_items_repository cannot be None")
        if batch_manager is None: raise ValueError("batch_manager cannot be None")
        self.outgoing_shipments_repository = outgoing_shipments_repository
        self.shipment_items_repository = shipment_items_repository
        self.batch_manager = batch_manager

    def _generate_shipment_number(self) -> str:
        sequence = self.outgoing_shipments_repository.count() + 1
        while self.outgoing_shipments_repository.get_by_shipment_number(f"{SHIPMENT_NUMBER_PREFIX}{sequence:06d}"):
            sequence += 1
        return f"{SHIPMENT_NUMBER_PREFIX}{sequence:06d}"

    def create_shipment(self,
                        customer_name: str,
                        items: List[Dict[str, Any]],
                        carrier: Optional[str] = None,
                        expected_date: Union[date, str, None] = None,
                        shipping_address: Optional[str] = None,
                        notes: Optional[str] = None,
                        warehouse_id: Optional[str] = None) -> OutgoingShipmentEntity:
        """
        Creates a pending shipment.
        :param items: dicts with 'product_id' and a positive whole 'quantity'.
        """
        if not customer_name or not customer_name.strip():
            raise ValueError("Customer name is required.")
        if not items:
            raise ValueError("A shipment needs at least one item.")

        item_entities = []
        for index, item in enumerate(items, start=1):
            quantity = item.get("quantity")
            if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
                raise ValueError(f"Item {index}: quantity must be a positive whole number.")
            if not self.batch_manager.get_product(item.get("product_id")):
                raise ValueError(f"Item {index}: product {item.get('product_id')} not found.")
            item_entities.append(ShipmentItemEntity(product_id=item["product_id"], quantity=quantity))

        shipment = OutgoingShipmentEntity(
            shipment_number=self._generate_shipment_number(),
            customer_name=customer_name.strip(),
            carrier=carrier,
            expected_date=to_date(expected_date),
            shipping_address=shipping_address,
            notes=notes,
            warehouse_id=warehouse_id,
        )

        # --- Start Transactional Block (Conceptual) ---
        created = self.outgoing_shipments_repository.add(shipment)
        try:
            for item in item_entities:
                item.shipment_id = created.id
                self.shipment_items_repository.add(item)
        except Exception:
            logger.error(f"Failed to store items for shipment {created.shipment_number}. Rolling back.", exc_info=True)
            self.outgoing_shipments_repository.delete(created.id)  # items cascade
            raise
        # --- End Transactional Block (Conceptual) ---

        created.items = item_entities
        logger.info(f"Shipment {created.shipment_number} (ID: {created.id}) for '{created.customer_name}' "
                    f"created with {len(item_entities)} item(s).")
        return created

    def get_shipment(self, shipment_id: int) -> Optional[OutgoingShipmentEntity]:
        shipment = self.outgoing_shipments_repository.get_by_id(shipment_id)
        if shipment:
            shipment.items = self.shipment_items_repository.get_by_shipment_id(shipment.id)
        return shipment

    def _get_existing(self, shipment_id: int) -> OutgoingShipmentEntity:
        shipment = self.get_shipment(shipment_id)
        if not shipment:
            raise ValueError(f"Shipment with ID {shipment_id} not found.")
        return shipment

    @staticmethod
    def _check_transition(shipment: OutgoingShipmentEntity, target: ShipmentStatus) -> None:
        if target not in SHIPMENT_TRANSITIONS[shipment.status]:
            raise ValueError(f"Shipment {shipment.shipment_number} cannot move from "
                             f"'{shipment.status.value}' to '{target.value}'.")

    def mark_ready(self, shipment_id: int) -> OutgoingShipmentEntity:
        shipment = self._get_existing(shipment_id)
        self._check_transition(shipment, ShipmentStatus.READY_TO_SHIP)
        shipment.status = ShipmentStatus.READY_TO_SHIP
        self.outgoing_shipments_repository.update(shipment)
        logger.info(f"Shipment {shipment.shipment_number} is ready to ship.")
        return shipment

    def mark_shipped(self,
                     shipment_id: int,
                     tracking_number: Optional[str] = None,
                     strategy: Union[AllocationStrategy, str] = AllocationStrategy.FIFO,
                     shipped_date: Union[date, str, None] = None) -> OutgoingShipmentEntity:
        """Allocates every item from product batches, then marks the shipment shipped."""
        shipment = self._get_existing(shipment_id)
        self._check_transition(shipment, ShipmentStatus.SHIPPED)
        shipped_on = to_date(shipped_date) or date.today()

        previous_status = shipment.status
        previous_tracking = shipment.tracking_number
        try:
            for item in shipment.items:
                self.batch_manager.allocate(item.product_id, item.quantity, strategy,
                                            order_reference=shipment.shipment_number, as_of=shipped_on)
            shipment.status = ShipmentStatus.SHIPPED
            shipment.shipped_date = shipped_on
            if tracking_number:
                shipment.tracking_number = tracking_number
            self.outgoing_shipments_repository.update(shipment)
        except Exception:
            logger.error(f"Shipping {shipment.shipment_number} failed. Reversing allocations.", exc_info=True)
            self.batch_manager.reverse_allocation(shipment.shipment_number)
            shipment.status = previous_status
            shipment.shipped_date = None
            shipment.tracking_number = previous_tracking
            raise

        logger.info(f"Shipment {shipment.shipment_number} shipped on {shipped_on} "
                    f"(tracking: {shipment.tracking_number}).")
        return shipment

    def mark_delivered(self, shipment_id: int,
                       delivered_date: Union[date, str, None] = None) -> OutgoingShipmentEntity:
        shipment = self._get_existing(shipment_id)
        self._check_transition(shipment, ShipmentStatus.DELIVERED)
        shipment.status = ShipmentStatus.DELIVERED
        shipment.delivered_date = to_date(delivered_date) or date.today()
        self.outgoing_shipments_repository.update(shipment)
        logger.info(f"Shipment {shipment.shipment_number} delivered on {shipment.delivered_date}.")
        return shipment

    def cancel_shipment(self, shipment_id: int) -> OutgoingShipmentEntity:
        shipment = self._get_existing(shipment_id)
        self._check_transition(shipment, ShipmentStatus.CANCELLED)
        shipment.status = ShipmentStatus.CANCELLED
        self.outgoing_shipments_repository.update(shipment)
        logger.info(f"Shipment {shipment.shipment_number} cancelled.")
        return shipment

    def update_status(self, shipment_id: int, new_status: ShipmentStatus) -> OutgoingShipmentEntity:
        handlers = {
            ShipmentStatus.READY_TO_SHIP: self.mark_ready,
            ShipmentStatus.SHIPPED: self.mark_shipped,
            ShipmentStatus.DELIVERED: self.mark_delivered,
            ShipmentStatus.CANCELLED: self.cancel_shipment,
        }
        if new_status not in handlers:
            raise ValueError(f"Shipments cannot be moved back to '{new_status.value}'.")
        return handlers[new_status](shipment_id)

    def update_expected_date(self, shipment_id: int,
                             expected_date: Union[date, str, None]) -> OutgoingShipmentEntity:
        shipment = self._get_existing(shipment_id)
        if shipment.status in (ShipmentStatus.DELIVERED, ShipmentStatus.CANCELLED):
            raise ValueError(f"Shipment {shipment.shipment_number} is {shipment.status.value}; "
                             f"its expected date can no longer change.")
        shipment.expected_date = to_date(expected_date)
        self.outgoing_shipments_repository.update(shipment)
        logger.info(f"Shipment {shipment.shipment_number} expected date set to {shipment.expected_date}.")
        return shipment

    def list_shipments(self,
                       status: Optional[ShipmentStatus] = None,
                       search: Optional[str] = None) -> List[OutgoingShipmentEntity]:
        criteria = {"status": status} if status is not None else {}
        shipments = self.outgoing_shipments_repository.find_by_criteria(criteria, order_by="id DESC")
        needle = (search or "").strip().lower()
        if needle:
            shipments = [s for s in shipments
                         if needle in s.shipment_number.lower()
                         or needle in s.customer_name.lower()
                         or needle in (s.tracking_number or "").lower()]
        for shipment in shipments:
            shipment.items = self.shipment_items_repository.get_by_shipment_id(shipment.id)
        return shipments
