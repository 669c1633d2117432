"""Operation aggregate (CQRS) — one step of a warehouse fulfillment chain.

An Operation groups the items the warehouse must receive, inspect, store,
pick, pack or ship for one source document. Items are fulfilled
progressively, and the Operation status is re-derived from its items after
every quantity change.

State Machine:
    DRAFT → ASSIGNED → IN_PROGRESS → {PARTIAL | COMPLETED}
    {DRAFT, ASSIGNED, IN_PROGRESS} → {PARTIAL | COMPLETED} (item processing)
    PARTIAL → COMPLETED
    {DRAFT, ASSIGNED, IN_PROGRESS, PARTIAL} → CANCELLED
    COMPLETED, CANCELLED are terminal; only notes may change afterwards.

Item State:
    PENDING → IN_PROGRESS → COMPLETED
    {PENDING, IN_PROGRESS} → CANCELLED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import (
    Date,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)

from warehouse.domain import warehouse
from warehouse.operation.events import (
    ItemCancelled,
    ItemProcessed,
    OperationAssigned,
    OperationCancelled,
    OperationCompleted,
    OperationCreated,
    OperationDetailsUpdated,
    OperationProgressed,
    OperationStarted,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OperationType(Enum):
    RECEIVING = "receiving"
    QUALITY_CONTROL = "quality_control"
    PUTAWAY = "putaway"
    PICKING = "picking"
    PACKING = "packing"
    SHIPPING = "shipping"
    MANUAL = "manual"


class OperationStatus(Enum):
    DRAFT = "draft"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    PARTIAL = "partial"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ItemStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OriginType(Enum):
    MANUAL = "manual"
    PURCHASE_ORDER = "purchase_order"
    SALE = "sale"
    OPERATION = "operation"


_VALID_TRANSITIONS = {
    OperationStatus.DRAFT: {
        OperationStatus.ASSIGNED,
        OperationStatus.IN_PROGRESS,
        OperationStatus.PARTIAL,
        OperationStatus.COMPLETED,
        OperationStatus.CANCELLED,
    },
    OperationStatus.ASSIGNED: {
        OperationStatus.IN_PROGRESS,
        OperationStatus.PARTIAL,
        OperationStatus.COMPLETED,
        OperationStatus.CANCELLED,
    },
    OperationStatus.IN_PROGRESS: {
        OperationStatus.PARTIAL,
        OperationStatus.COMPLETED,
        OperationStatus.CANCELLED,
    },
    OperationStatus.PARTIAL: {OperationStatus.COMPLETED, OperationStatus.CANCELLED},
    OperationStatus.COMPLETED: set(),  # terminal
    OperationStatus.CANCELLED: set(),  # terminal
}

TERMINAL_STATUSES = {OperationStatus.COMPLETED, OperationStatus.CANCELLED}

PENDING_STATUSES = {
    OperationStatus.DRAFT,
    OperationStatus.ASSIGNED,
    OperationStatus.IN_PROGRESS,
    OperationStatus.PARTIAL,
}

_CLOSED_ITEM_STATUSES = {ItemStatus.COMPLETED.value, ItemStatus.CANCELLED.value}

_PROGRESSED_ITEM_STATUSES = {ItemStatus.IN_PROGRESS.value, ItemStatus.COMPLETED.value}

_EDITABLE_FIELDS = {
    "name",
    "source_location_id",
    "destination_location_id",
    "assigned_to",
    "priority",
    "scheduled_date",
    "notes",
}

DEFAULT_PRIORITY = 5
DEFAULT_CANCEL_REASON = "No reason given"


def item_status_for(processed_quantity: int, demanded_quantity: int) -> ItemStatus:
    """Derive an item status from its quantities."""
    if processed_quantity >= demanded_quantity:
        return ItemStatus.COMPLETED
    if processed_quantity > 0:
        return ItemStatus.IN_PROGRESS
    return ItemStatus.PENDING


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@warehouse.entity(part_of="Operation")
class OperationItem:
    """A demanded quantity of one product, variant or serial within an operation."""

    product_id = Identifier(required=True)
    variant_id = Identifier()
    serial_id = Identifier()
    sku = String(max_length=100)
    demanded_quantity = Integer(required=True, min_value=1)
    processed_quantity = Integer(default=0, min_value=0)
    lot_number = String(max_length=100)
    expires_on = Date()
    source_location_id = Identifier()
    destination_location_id = Identifier()
    status = String(
        max_length=50,
        choices=ItemStatus,
        default=ItemStatus.PENDING.value,
    )
    processed_by = Identifier()
    processed_at = DateTime()
    notes = Text()

    @property
    def remaining_quantity(self) -> int:
        return self.demanded_quantity - (self.processed_quantity or 0)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@warehouse.aggregate
class Operation:
    """One stage of a warehouse fulfillment process for a tenant's branch."""

    tenant_id = Identifier(required=True)
    branch_id = Identifier(required=True)
    folio = String(required=True, max_length=50)
    name = String(max_length=200)
    operation_type = String(required=True, max_length=50, choices=OperationType)
    status = String(
        max_length=50,
        choices=OperationStatus,
        default=OperationStatus.DRAFT.value,
    )

    # Origin document. When origin_type is "operation", origin_id is the
    # predecessor Operation in the chain.
    origin_type = String(max_length=50, choices=OriginType, default=OriginType.MANUAL.value)
    origin_id = Identifier()
    origin_folio = String(max_length=50)

    source_location_id = Identifier()
    destination_location_id = Identifier()
    assigned_to = Identifier()
    priority = Integer(default=DEFAULT_PRIORITY, min_value=1)
    scheduled_date = DateTime()
    notes = Text()
    internal_notes = Text()
    items = HasMany(OperationItem)

    # Bumped by every pack/unpack so concurrent packers of the same operation
    # conflict on the aggregate version.
    packing_revision = Integer(default=0)

    started_at = DateTime()
    completed_at = DateTime()
    cancelled_at = DateTime()
    created_by = Identifier()
    created_at = DateTime()
    updated_by = Identifier()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def processed_quantity_never_exceeds_demand(self):
        for item in self.items or []:
            if (item.processed_quantity or 0) > item.demanded_quantity:
                raise ValidationError(
                    {"items": [f"Processed quantity of item {item.id} exceeds its demanded quantity"]}
                )

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        tenant_id: str,
        branch_id: str,
        folio: str,
        operation_type: str,
        items_data: list[dict],
        name: str | None = None,
        origin_type: str | None = None,
        origin_id: str | None = None,
        origin_folio: str | None = None,
        source_location_id: str | None = None,
        destination_location_id: str | None = None,
        assigned_to: str | None = None,
        priority: int | None = None,
        scheduled_date: datetime | None = None,
        notes: str | None = None,
        created_by: str | None = None,
    ):
        """Register a new operation in draft with its demanded items."""
        try:
            op_type = OperationType(operation_type)
        except ValueError:
            raise ValidationError({"operation_type": [f"Unknown operation type: {operation_type}"]}) from None

        origin_type = origin_type or OriginType.MANUAL.value
        if origin_type == OriginType.OPERATION.value and not origin_id:
            raise ValidationError({"origin_id": ["A predecessor operation is required"]})

        now = datetime.now(UTC)
        op = cls(
            tenant_id=tenant_id,
            branch_id=branch_id,
            folio=folio,
            name=name or f"{op_type.value} {folio}",
            operation_type=op_type.value,
            status=OperationStatus.DRAFT.value,
            origin_type=origin_type,
            origin_id=origin_id,
            origin_folio=origin_folio,
            source_location_id=source_location_id,
            destination_location_id=destination_location_id,
            assigned_to=assigned_to,
            priority=priority if priority is not None else DEFAULT_PRIORITY,
            scheduled_date=scheduled_date,
            notes=notes,
            created_by=created_by,
            created_at=now,
            updated_by=created_by,
            updated_at=now,
        )
        for item_data in items_data:
            data = dict(item_data)
            data.setdefault("source_location_id", source_location_id)
            data.setdefault("destination_location_id", destination_location_id)
            data["processed_quantity"] = 0
            data["status"] = ItemStatus.PENDING.value
            op.add_items(OperationItem(**data))

        op.raise_(
            OperationCreated(
                operation_id=str(op.id),
                tenant_id=str(tenant_id),
                branch_id=str(branch_id),
                folio=folio,
                name=op.name,
                operation_type=op.operation_type,
                status=op.status,
                origin_type=origin_type,
                origin_id=str(origin_id) if origin_id else "",
                origin_folio=origin_folio or "",
                assigned_to=str(assigned_to) if assigned_to else "",
                priority=op.priority,
                scheduled_date=scheduled_date,
                item_count=len(items_data),
                total_demanded=sum(i.demanded_quantity for i in op.items),
                created_by=str(created_by) if created_by else "",
                created_at=now,
            )
        )
        return op

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return OperationStatus(self.status) in TERMINAL_STATUSES

    @property
    def total_demanded(self) -> int:
        return sum(i.demanded_quantity for i in (self.items or []))

    @property
    def total_processed(self) -> int:
        return sum(i.processed_quantity or 0 for i in (self.items or []))

    def _assert_can_transition(self, target_status: OperationStatus) -> None:
        current = OperationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _ensure_not_terminal(self, action: str) -> None:
        if self.is_terminal:
            raise ValidationError({"status": [f"Cannot {action} a {self.status} operation"]})

    def find_item(self, item_id: str) -> OperationItem:
        """Return the item with ``item_id`` or raise ObjectNotFoundError."""
        item = next((i for i in (self.items or []) if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError(f"Item {item_id} not found in operation {self.id}")
        return item

    def _touch(self, user_id: str | None, now: datetime) -> None:
        self.updated_at = now
        if user_id:
            self.updated_by = user_id

    def _append_internal_note(self, note: str) -> None:
        self.internal_notes = f"{self.internal_notes}\n{note}" if self.internal_notes else note

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def update_details(self, changes: dict, updated_by: str | None = None) -> None:
        """Edit name, locations, assignee, priority, schedule or notes."""
        if not changes:
            raise ValidationError({"fields": ["No fields to update"]})

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError({"fields": [f"Fields cannot be updated: {', '.join(sorted(unknown))}"]})

        if self.is_terminal and set(changes) - {"notes"}:
            raise ValidationError({"status": [f"Only notes can be changed on a {self.status} operation"]})

        now = datetime.now(UTC)
        for field_name, value in changes.items():
            setattr(self, field_name, value)
        self._touch(updated_by, now)
        self.raise_(
            OperationDetailsUpdated(
                operation_id=str(self.id),
                tenant_id=str(self.tenant_id),
                changes=json.dumps(changes, default=str),
                assigned_to=str(self.assigned_to) if self.assigned_to else "",
                priority=self.priority,
                scheduled_date=self.scheduled_date,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Assignment and start
    # -------------------------------------------------------------------
    def assign(self, user_id: str) -> None:
        """Assign the operation to a warehouse user; a draft becomes assigned."""
        self._ensure_not_terminal("assign")
        if not user_id:
            raise ValidationError({"user_id": ["An assignee is required"]})

        now = datetime.now(UTC)
        self.assigned_to = user_id
        if OperationStatus(self.status) == OperationStatus.DRAFT:
            self._assert_can_transition(OperationStatus.ASSIGNED)
            self.status = OperationStatus.ASSIGNED.value
        self._touch(user_id, now)
        self.raise_(
            OperationAssigned(
                operation_id=str(self.id),
                tenant_id=str(self.tenant_id),
                assigned_to=str(user_id),
                status=self.status,
                assigned_at=now,
            )
        )

    def start(self, user_id: str | None = None) -> None:
        """Begin work. The first start timestamp is kept on repeated starts."""
        self._ensure_not_terminal("start")

        now = datetime.now(UTC)
        if self.started_at is None:
            self.started_at = now
        if not self.assigned_to and user_id:
            self.assigned_to = user_id
        if OperationStatus(self.status) in (OperationStatus.DRAFT, OperationStatus.ASSIGNED):
            self._assert_can_transition(OperationStatus.IN_PROGRESS)
            self.status = OperationStatus.IN_PROGRESS.value
        self._touch(user_id, now)
        self.raise_(
            OperationStarted(
                operation_id=str(self.id),
                tenant_id=str(self.tenant_id),
                assigned_to=str(self.assigned_to) if self.assigned_to else "",
                status=self.status,
                started_at=self.started_at,
            )
        )

    # -------------------------------------------------------------------
    # Item processing
    # -------------------------------------------------------------------
    def _check_processable(self, item: OperationItem, quantity: int) -> None:
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be greater than zero"]})
        if item.status == ItemStatus.CANCELLED.value:
            raise ValidationError({"item_id": [f"Item {item.id} is cancelled and cannot be processed"]})
        if item.status == ItemStatus.COMPLETED.value:
            raise ValidationError({"item_id": [f"Item {item.id} is already completed"]})
        if quantity > item.remaining_quantity:
            raise ValidationError(
                {
                    "quantity": [
                        f"Quantity {quantity} exceeds the remaining {item.remaining_quantity} "
                        f"of the {item.demanded_quantity} demanded for item {item.id}"
                    ]
                }
            )

    def _apply_quantity(
        self,
        item: OperationItem,
        quantity: int,
        destination_location_id: str | None,
        processed_by: str | None,
        now: datetime,
    ) -> None:
        item.processed_quantity = (item.processed_quantity or 0) + quantity
        if destination_location_id:
            item.destination_location_id = destination_location_id
        item.status = item_status_for(item.processed_quantity, item.demanded_quantity).value
        item.processed_by = processed_by
        item.processed_at = now
        self.raise_(
            ItemProcessed(
                operation_id=str(self.id),
                tenant_id=str(self.tenant_id),
                item_id=str(item.id),
                quantity=quantity,
                processed_quantity=item.processed_quantity,
                demanded_quantity=item.demanded_quantity,
                item_status=item.status,
                destination_location_id=str(destination_location_id) if destination_location_id else "",
                processed_by=str(processed_by) if processed_by else "",
                processed_at=now,
            )
        )

    def _refresh_status(self, now: datetime, user_id: str | None = None) -> None:
        """Re-derive the operation status from its items.

        COMPLETED when every item is completed or cancelled, PARTIAL when
        some item has progress, unchanged otherwise.
        """
        items = list(self.items or [])
        if not items:
            return

        if all(i.status in _CLOSED_ITEM_STATUSES for i in items):
            target = OperationStatus.COMPLETED
        elif any(i.status in _PROGRESSED_ITEM_STATUSES for i in items):
            target = OperationStatus.PARTIAL
        else:
            return

        previous = OperationStatus(self.status)
        if target == previous:
            return

        self._assert_can_transition(target)
        self.status = target.value
        self.raise_(
            OperationProgressed(
                operation_id=str(self.id),
                tenant_id=str(self.tenant_id),
                previous_status=previous.value,
                status=target.value,
                total_processed=self.total_processed,
                progressed_at=now,
            )
        )

        if target == OperationStatus.COMPLETED:
            self.completed_at = now
            self.raise_(
                OperationCompleted(
                    operation_id=str(self.id),
                    tenant_id=str(self.tenant_id),
                    total_processed=self.total_processed,
                    completed_by=str(user_id) if user_id else "",
                    completed_at=now,
                )
            )

    def process_item(
        self,
        item_id: str,
        quantity: int,
        destination_location_id: str | None = None,
        processed_by: str | None = None,
    ) -> OperationItem:
        """Add ``quantity`` to an item's processed quantity.

        Quantities are never subtracted, and a delta that would push the
        item past its demand is rejected.
        """
        self._ensure_not_terminal("process items of")
        item = self.find_item(item_id)
        self._check_processable(item, quantity)

        now = datetime.now(UTC)
        self._apply_quantity(item, quantity, destination_location_id, processed_by, now)
        if self.started_at is None:
            self.started_at = now
        self._touch(processed_by, now)
        self._refresh_status(now, processed_by)
        return item

    def complete(self, lines: list[dict], completed_by: str | None = None) -> None:
        """Apply a batch of item quantities atomically.

        Every line is validated against the operation before any quantity
        is applied. Lines for the same item are summed.
        """
        self._ensure_not_terminal("complete")
        if not lines:
            raise ValidationError({"items": ["At least one item is required"]})

        items_by_id = {str(i.id): i for i in (self.items or [])}
        parsed = []
        totals: dict[str, int] = {}
        for line in lines:
            item_id = str(line.get("item_id") or "")
            if item_id not in items_by_id:
                raise ValidationError({"items": [f"Item {item_id} does not belong to this operation"]})
            try:
                quantity = int(line.get("quantity"))
            except (TypeError, ValueError):
                raise ValidationError({"quantity": [f"Invalid quantity for item {item_id}"]}) from None
            if quantity <= 0:
                raise ValidationError({"quantity": ["Quantity must be greater than zero"]})
            totals[item_id] = totals.get(item_id, 0) + quantity
            parsed.append((item_id, quantity, line.get("destination_location_id")))

        for item_id, total in totals.items():
            self._check_processable(items_by_id[item_id], total)

        now = datetime.now(UTC)
        for item_id, quantity, destination_location_id in parsed:
            self._apply_quantity(items_by_id[item_id], quantity, destination_location_id, completed_by, now)
        if self.started_at is None:
            self.started_at = now
        self._touch(completed_by, now)
        self._refresh_status(now, completed_by)

    def cancel_item(self, item_id: str, cancelled_by: str | None = None) -> bool:
        """Cancel one item, keeping its processed quantity.

        Returns False when the item was already cancelled.
        """
        self._ensure_not_terminal("cancel items of")
        item = self.find_item(item_id)
        if item.status == ItemStatus.CANCELLED.value:
            return False
        if item.status == ItemStatus.COMPLETED.value:
            raise ValidationError({"item_id": [f"Item {item.id} is completed and cannot be cancelled"]})

        now = datetime.now(UTC)
        item.status = ItemStatus.CANCELLED.value
        self._touch(cancelled_by, now)
        self.raise_(
            ItemCancelled(
                operation_id=str(self.id),
                tenant_id=str(self.tenant_id),
                item_id=str(item.id),
                processed_quantity=item.processed_quantity or 0,
                cancelled_at=now,
            )
        )
        self._refresh_status(now, cancelled_by)
        return True

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason: str | None = None, cancelled_by: str | None = None) -> bool:
        """Cancel the operation and every item not yet completed.

        Cancelling an already-cancelled operation changes nothing and
        returns False.
        """
        current = OperationStatus(self.status)
        if current == OperationStatus.CANCELLED:
            return False
        self._assert_can_transition(OperationStatus.CANCELLED)

        now = datetime.now(UTC)
        cancelled_ids = []
        for item in self.items or []:
            if item.status not in _CLOSED_ITEM_STATUSES:
                item.status = ItemStatus.CANCELLED.value
                cancelled_ids.append(str(item.id))

        reason = (reason or "").strip() or DEFAULT_CANCEL_REASON
        self._append_internal_note(f"Cancelled: {reason}")
        self.status = OperationStatus.CANCELLED.value
        self.cancelled_at = now
        self._touch(cancelled_by, now)
        self.raise_(
            OperationCancelled(
                operation_id=str(self.id),
                tenant_id=str(self.tenant_id),
                reason=reason,
                cancelled_item_ids=json.dumps(cancelled_ids),
                cancelled_by=str(cancelled_by) if cancelled_by else "",
                cancelled_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Packing
    # -------------------------------------------------------------------
    def record_packing_activity(self, user_id: str | None = None) -> None:
        """Mark the operation as touched by a pack, unpack or package cancel."""
        self.packing_revision = (self.packing_revision or 0) + 1
        self._touch(user_id, datetime.now(UTC))
