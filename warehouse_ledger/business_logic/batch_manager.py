# warehouse_ledger/business_logic/batch_manager.py

import logging
from typing import Optional, List, Dict, Any, Union, TYPE_CHECKING
from datetime import date, timedelta
from decimal import Decimal

from warehouse_ledger.business_logic.entities.product_entity import ProductEntity
from warehouse_ledger.business_logic.entities.product_batch_entity import ProductBatchEntity
from warehouse_ledger.business_logic.entities.batch_allocation_entity import BatchAllocationEntity
from warehouse_ledger.constants import AllocationStrategy, ExpirationStatus
from warehouse_ledger.utils.date_converter import to_date
from warehouse_ledger.utils.money import to_money

if TYPE_CHECKING:
    from warehouse_ledger.data_access.products_repository import ProductsRepository
    from warehouse_ledger.data_access.product_batches_repository import ProductBatchesRepository
    from warehouse_ledger.data_access.batch_allocations_repository import BatchAllocationsRepository

logger = logging.getLogger(__name__)

EXPIRY_CRITICAL_DAYS = 7
EXPIRY_WARNING_DAYS = 30

_UNCHANGED = object()


def _to_quantity(value: Any, field_name: str = "quantity") -> int:
    """Whole units only; rejects fractions and non-numbers."""
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a whole number.")
    if isinstance(value, int):
        return value
    try:
        as_decimal = Decimal(str(value))
    except (ArithmeticError, ValueError):
        raise ValueError(f"{field_name} must be a whole number, got {value!r}.")
    if as_decimal != as_decimal.to_integral_value():
        raise ValueError(f"{field_name} must be a whole number, got {value!r}.")
    return int(as_decimal)


def expiration_status(batch: ProductBatchEntity, as_of: Optional[date] = None) -> ExpirationStatus:
    if batch.expiration_date is None:
        return ExpirationStatus.NONE
    days_left = (batch.expiration_date - (as_of or date.today())).days
    if days_left < 0:
        return ExpirationStatus.EXPIRED
    if days_left <= EXPIRY_CRITICAL_DAYS:
        return ExpirationStatus.CRITICAL
    if days_left <= EXPIRY_WARNING_DAYS:
        return ExpirationStatus.WARNING
    return ExpirationStatus.NORMAL


def proportional_split(quantities: List[int], target: int) -> List[int]:
    """
    Scales whole-unit quantities so they add up to target.
    Each share is floored; the units left over go one each to the largest
    fractional remainders, earlier positions winning ties.
    """
    total = sum(quantities)
    if total <= 0:
        raise ValueError("Cannot scale quantities that add up to zero.")
    floors = [q * target // total for q in quantities]
    remainders = [q * target % total for q in quantities]
    leftover = target - sum(floors)
    order = sorted(range(len(quantities)), key=lambda i: (-remainders[i], i))
    for i in order[:leftover]:
        floors[i] += 1
    return floors


class BatchManager:
    def __init__(self,
                 products_repository: 'ProductsRepository',
                 product_batches_repository: 'ProductBatchesRepository',
                 batch_allocations_repository: 'BatchAllocationsRepository'):
        if products_repository is None: raise ValueError("products_repository cannot be None")
        if product_batches_repository is None: raise ValueError("product_batches_repository cannot be None")
        if batch_allocations_repository is None: raise ValueError("batch_allocations_repository cannot be None")
        self.products_repository = products_repository
        self.product_batches_repository = product_batches_repository
        self.batch_allocations_repository = batch_allocations_repository

    # --- Products ---

    def add_product(self,
                    sku: str,
                    name: str,
                    unit_price: Any = 0,
                    stock: Any = 0,
                    warehouse_id: Optional[str] = None,
                    description: Optional[str] = None) -> ProductEntity:
        if not sku or not sku.strip():
            raise ValueError("Product SKU is required.")
        if not name or not name.strip():
            raise ValueError("Product name is required.")
        unit_price = to_money(unit_price, "unit_price")
        if unit_price < 0:
            raise ValueError("Unit price cannot be negative.")
        stock = _to_quantity(stock, "stock")
        if stock < 0:
            raise ValueError("Stock cannot be negative.")
        if self.products_repository.get_by_sku(sku.strip()):
            raise ValueError(f"A product with SKU '{sku}' already exists.")

        product = self.products_repository.add(ProductEntity(
            sku=sku.strip(), name=name.strip(), unit_price=unit_price, stock=stock,
            warehouse_id=warehouse_id, description=description,
        ))
        logger.info(f"Product '{product.name}' (SKU: {product.sku}, ID: {product.id}) added with stock {stock}.")
        return product

    def get_product(self, product_id: int) -> Optional[ProductEntity]:
        if not isinstance(product_id, int) or product_id <= 0:
            logger.error(f"Invalid product_id: {product_id}")
            return None
        return self.products_repository.get_by_id(product_id)

    def _get_existing_product(self, product_id: int) -> ProductEntity:
        product = self.get_product(product_id)
        if not product:
            raise ValueError(f"Product with ID {product_id} not found.")
        return product

    def adjust_stock(self, product_id: int, delta: Any) -> ProductEntity:
        """Changes the aggregate stock by delta units. Batches are not touched."""
        product = self._get_existing_product(product_id)
        delta = _to_quantity(delta, "delta")
        new_stock = product.stock + delta
        if new_stock < 0:
            raise ValueError(f"Stock for '{product.name}' cannot go below zero (current {product.stock}, change {delta}).")
        self.products_repository.set_stock(product.id, new_stock)
        product.stock = new_stock
        if self.product_batches_repository.sum_quantity(product.id) > new_stock:
            logger.warning(f"Product ID {product.id}: batch quantities now exceed stock {new_stock}.")
        logger.info(f"Stock for product ID {product.id} adjusted by {delta} to {new_stock}.")
        return product

    # --- Batches ---

    def get_batches(self, product_id: int) -> List[ProductBatchEntity]:
        return self.product_batches_repository.get_by_product_id(product_id)

    def available_stock(self, product_id: int, exclude_batch_id: Optional[int] = None) -> int:
        """Units of stock not yet assigned to a batch (ignoring exclude_batch_id's own quantity)."""
        product = self._get_existing_product(product_id)
        return product.stock - self.product_batches_repository.sum_quantity(product.id, exclude_batch_id)

    def _generate_batch_number(self, product_id: int, received: date) -> str:
        existing = {b.batch_number for b in self.get_batches(product_id)}
        sequence = len(existing) + 1
        while True:
            candidate = f"BATCH-{received:%Y%m%d}-{product_id}-{sequence:03d}"
            if candidate not in existing:
                return candidate
            sequence += 1

    def _check_quantity(self, product_id: int, quantity: int, exclude_batch_id: Optional[int] = None) -> None:
        if quantity < 0:
            raise ValueError("Batch quantity cannot be negative.")
        available = self.available_stock(product_id, exclude_batch_id)
        if quantity > available:
            raise ValueError(f"Batch quantity {quantity} exceeds available stock ({available}).")

    def create_batch(self,
                     product_id: int,
                     quantity: Any,
                     batch_number: Optional[str] = None,
                     cost_price: Any = None,
                     received_date: Union[date, str, None] = None,
                     expiration_date: Union[date, str, None] = None,
                     location: Optional[str] = None,
                     supplier_reference: Optional[str] = None,
                     notes: Optional[str] = None) -> ProductBatchEntity:
        product = self._get_existing_product(product_id)
        quantity = _to_quantity(quantity)
        self._check_quantity(product.id, quantity)

        received = to_date(received_date) or date.today()
        expiration = to_date(expiration_date)
        if expiration is not None and expiration < received:
            raise ValueError("Expiration date cannot be before the received date.")
        cost = product.unit_price if cost_price is None or cost_price == "" else to_money(cost_price, "cost_price")
        if cost < 0:
            raise ValueError("Cost price cannot be negative.")

        batch = self.product_batches_repository.add(ProductBatchEntity(
            product_id=product.id,
            batch_number=(batch_number or "").strip() or self._generate_batch_number(product.id, received),
            quantity=quantity,
            received_date=received,
            cost_price=cost,
            expiration_date=expiration,
            location=location,
            supplier_reference=supplier_reference,
            notes=notes,
            warehouse_id=product.warehouse_id,
        ))
        logger.info(f"Batch {batch.batch_number} (ID: {batch.id}) of {quantity} units created for product ID {product.id}.")
        return batch

    def _get_existing_batch(self, batch_id: int) -> ProductBatchEntity:
        batch = self.product_batches_repository.get_by_id(batch_id)
        if not batch:
            raise ValueError(f"Batch with ID {batch_id} not found.")
        return batch

    def update_batch(self,
                     batch_id: int,
                     quantity: Any = _UNCHANGED,
                     batch_number: Any = _UNCHANGED,
                     cost_price: Any = _UNCHANGED,
                     received_date: Any = _UNCHANGED,
                     expiration_date: Any = _UNCHANGED,
                     location: Any = _UNCHANGED,
                     supplier_reference: Any = _UNCHANGED,
                     notes: Any = _UNCHANGED) -> ProductBatchEntity:
        batch = self._get_existing_batch(batch_id)
        if quantity is not _UNCHANGED:
            quantity = _to_quantity(quantity)
            self._check_quantity(batch.product_id, quantity, exclude_batch_id=batch.id)
            batch.quantity = quantity
        if batch_number is not _UNCHANGED:
            if not batch_number or not str(batch_number).strip():
                raise ValueError("Batch number cannot be empty.")
            batch.batch_number = str(batch_number).strip()
        if cost_price is not _UNCHANGED:
            cost = to_money(cost_price, "cost_price")
            if cost < 0:
                raise ValueError("Cost price cannot be negative.")
            batch.cost_price = cost
        if received_date is not _UNCHANGED:
            batch.received_date = to_date(received_date) or batch.received_date
        if expiration_date is not _UNCHANGED:
            batch.expiration_date = to_date(expiration_date)
        if batch.expiration_date is not None and batch.expiration_date < batch.received_date:
            raise ValueError("Expiration date cannot be before the received date.")
        if location is not _UNCHANGED:
            batch.location = location
        if supplier_reference is not _UNCHANGED:
            batch.supplier_reference = supplier_reference
        if notes is not _UNCHANGED:
            batch.notes = notes

        self.product_batches_repository.update(batch)
        logger.info(f"Batch ID {batch_id} updated.")
        return batch

    def delete_batch(self, batch_id: int) -> bool:
        batch = self._get_existing_batch(batch_id)
        deleted = self.product_batches_repository.delete(batch.id)
        logger.info(f"Batch {batch.batch_number} (ID: {batch.id}) deleted.")
        return deleted

    def check_consistency(self, product_id: int) -> Dict[str, Any]:
        product = self._get_existing_product(product_id)
        total = self.product_batches_repository.sum_quantity(product.id)
        return {
            "product_id": product.id,
            "total_in_batches": total,
            "stock": product.stock,
            "unallocated": product.stock - total,
            "is_consistent": total <= product.stock,
        }

    def sync_batches_to_stock(self, product_id: int) -> List[ProductBatchEntity]:
        """
        Rescales batch quantities so they add up exactly to the product's stock.
        Batches left with zero units are removed. Returns the remaining batches.
        """
        product = self._get_existing_product(product_id)
        batches = self.get_batches(product.id)  # received date order, so earlier batches win ties
        total = sum(b.quantity for b in batches)

        if total == 0:
            for batch in batches:
                self.product_batches_repository.delete(batch.id)
            if product.stock > 0:
                default_batch = self._create_default_batch(product, product.stock)
                logger.info(f"Product ID {product.id} had no batched units; default batch "
                            f"{default_batch.batch_number} now holds all {product.stock}.")
                return [default_batch]
            return []

        new_quantities = proportional_split([b.quantity for b in batches], product.stock)
        remaining = []
        for batch, new_quantity in zip(batches, new_quantities):
            if new_quantity == 0:
                self.product_batches_repository.delete(batch.id)
                logger.debug(f"Batch {batch.batch_number} emptied by sync and removed.")
                continue
            if new_quantity != batch.quantity:
                self.product_batches_repository.set_quantity(batch.id, new_quantity)
                batch.quantity = new_quantity
            remaining.append(batch)

        logger.info(f"Batches for product ID {product.id} synced: {total} -> {product.stock} units "
                    f"across {len(remaining)} batch(es).")
        return remaining

    def _create_default_batch(self, product: ProductEntity, quantity: int) -> ProductBatchEntity:
        today = date.today()
        return self.product_batches_repository.add(ProductBatchEntity(
            product_id=product.id,
            batch_number=self._generate_batch_number(product.id, today),
            quantity=quantity,
            received_date=today,
            cost_price=product.unit_price,
            notes="Created automatically from unbatched stock",
            warehouse_id=product.warehouse_id,
        ))

    def get_expiring_batches(self, within_days: int = EXPIRY_WARNING_DAYS,
                             as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        """Batches with stock that expire within the given days, or already have."""
        as_of = as_of or date.today()
        rows = []
        for batch in self.product_batches_repository.find_by_criteria(
                {"expiration_date": ("<=", as_of + timedelta(days=within_days)),
                 "quantity": (">", 0)},
                order_by="expiration_date ASC"):
            rows.append({"batch": batch, "status": expiration_status(batch, as_of),
                         "days_left": (batch.expiration_date - as_of).days})
        return rows

    # --- Allocation ---

    @staticmethod
    def _order_for_strategy(batches: List[ProductBatchEntity], strategy: AllocationStrategy,
                            as_of: date) -> List[ProductBatchEntity]:
        candidates = [b for b in batches if b.quantity > 0]
        if strategy == AllocationStrategy.FIFO:
            return sorted(candidates, key=lambda b: (b.received_date, b.id))
        if strategy == AllocationStrategy.LIFO:
            return sorted(candidates, key=lambda b: (b.received_date, b.id), reverse=True)
        # FEFO: soonest expiry first, expired batches never picked, undated last
        usable = [b for b in candidates if b.expiration_date is None or b.expiration_date >= as_of]
        return sorted(usable, key=lambda b: (b.expiration_date is None, b.expiration_date or date.max,
                                             b.received_date, b.id))

    def allocate(self,
                 product_id: int,
                 quantity: Any,
                 strategy: Union[AllocationStrategy, str] = AllocationStrategy.FIFO,
                 order_reference: Optional[str] = None,
                 as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        Draws quantity units from the product's batches in strategy order,
        reducing each batch and the product stock, and records an allocation
        per batch touched. When the batches fall short but enough stock is
        unbatched, that stock is first put in a default batch.
        """
        product = self._get_existing_product(product_id)
        quantity = _to_quantity(quantity)
        if quantity <= 0:
            raise ValueError("Allocation quantity must be greater than zero.")
        try:
            strategy = AllocationStrategy(strategy) if not isinstance(strategy, AllocationStrategy) else strategy
        except ValueError:
            raise ValueError(f"Unknown allocation strategy '{strategy}'.")
        as_of = as_of or date.today()

        ordered = self._order_for_strategy(self.get_batches(product.id), strategy, as_of)
        batched = sum(b.quantity for b in ordered)
        if batched < quantity:
            unbatched = product.stock - self.product_batches_repository.sum_quantity(product.id)
            if unbatched >= quantity - batched:
                default_batch = self._create_default_batch(product, unbatched)
                logger.info(f"Created default batch {default_batch.batch_number} with {unbatched} unbatched "
                            f"units of product ID {product.id} to cover allocation.")
                ordered = self._order_for_strategy(self.get_batches(product.id), strategy, as_of)
            else:
                raise ValueError(f"Insufficient inventory for '{product.name}': requested {quantity}, "
                                 f"available in batches {batched}, unbatched {max(unbatched, 0)}.")
        if product.stock < quantity:
            raise ValueError(f"Insufficient stock for '{product.name}': requested {quantity}, stock {product.stock}.")

        results: List[Dict[str, Any]] = []
        applied: List[tuple] = []  # (batch, previous quantity, allocation id)
        remaining = quantity
        try:
            for batch in ordered:
                if remaining == 0:
                    break
                take = min(batch.quantity, remaining)
                previous = batch.quantity
                self.product_batches_repository.set_quantity(batch.id, previous - take)
                batch.quantity = previous - take
                allocation = self.batch_allocations_repository.add(BatchAllocationEntity(
                    batch_id=batch.id,
                    product_id=product.id,
                    quantity=take,
                    allocation_date=as_of,
                    strategy=strategy,
                    order_reference=(order_reference or "").strip() or None,
                ))
                applied.append((batch, previous, allocation.id))
                results.append({
                    "allocation_id": allocation.id,
                    "batch_id": batch.id,
                    "batch_number": batch.batch_number,
                    "allocated_qty": take,
                    "location": batch.location,
                })
                remaining -= take
            self.products_repository.set_stock(product.id, product.stock - quantity)
        except Exception:
            logger.error(f"Allocation for product ID {product.id} failed. Restoring batches.", exc_info=True)
            for batch, previous, allocation_id in applied:
                self.product_batches_repository.set_quantity(batch.id, previous)
                self.batch_allocations_repository.delete(allocation_id)
            raise

        logger.info(f"Allocated {quantity} units of product ID {product.id} ({strategy.value}) from "
                    f"{len(results)} batch(es) for order '{order_reference}'.")
        return results

    def get_allocations(self, order_reference: str) -> List[BatchAllocationEntity]:
        order_reference = (order_reference or "").strip()
        if not order_reference:
            raise ValueError("An order reference is required to look up allocations.")
        return self.batch_allocations_repository.get_by_order_reference(order_reference)

    def reverse_allocation(self, order_reference: str) -> int:
        """
        Puts every unit allocated to an order back into its batch and the
        product stock, then removes the allocation records. Returns units restored.
        Allocations made without an order reference cannot be reversed.
        """
        allocations = self.get_allocations(order_reference)
        restored = 0
        for allocation in allocations:
            batch = self.product_batches_repository.get_by_id(allocation.batch_id) if allocation.batch_id else None
            product = self._get_existing_product(allocation.product_id)
            if batch:
                self.product_batches_repository.set_quantity(batch.id, batch.quantity + allocation.quantity)
            else:
                logger.warning(f"Batch ID {allocation.batch_id} no longer exists; "
                               f"{allocation.quantity} units return to unbatched stock.")
            self.products_repository.set_stock(product.id, product.stock + allocation.quantity)
            self.batch_allocations_repository.delete(allocation.id)
            restored += allocation.quantity
        logger.info(f"Reversed {len(allocations)} allocation(s) for order '{order_reference}', {restored} units restored.")
        return restored
