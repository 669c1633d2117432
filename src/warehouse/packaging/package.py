"""Package aggregate (CQRS) — a shipping container assembled during packing.

A Package belongs to a packing Operation and holds quantities taken from that
operation's fulfilled items. Contents and measures can change only while the
package is open.

State Machine:
    OPEN → CLOSED → LABELED → SHIPPED
    CLOSED → SHIPPED
    {OPEN, CLOSED} → CANCELLED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import InvalidStateError, ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from warehouse.domain import warehouse
from warehouse.packaging.events import (
    PackageCancelled,
    PackageClosed,
    PackageCreated,
    PackageItemAdded,
    PackageItemRemoved,
    PackageLabeled,
    PackageShipped,
    PackageUpdated,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PackageStatus(Enum):
    OPEN = "open"
    CLOSED = "closed"
    LABELED = "labeled"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    PackageStatus.OPEN: {PackageStatus.CLOSED, PackageStatus.CANCELLED},
    PackageStatus.CLOSED: {PackageStatus.LABELED, PackageStatus.SHIPPED, PackageStatus.CANCELLED},
    PackageStatus.LABELED: {PackageStatus.SHIPPED},
    PackageStatus.SHIPPED: set(),  # terminal
    PackageStatus.CANCELLED: set(),  # terminal
}

_EDITABLE_FIELDS = {
    "weight_kg",
    "length_cm",
    "width_cm",
    "height_cm",
    "notes",
    "carrier",
    "tracking_code",
}

DEFAULT_CANCEL_REASON = "No reason given"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@warehouse.entity(part_of="Package")
class PackageItem:
    """A quantity of one operation item placed in the package."""

    operation_item_id = Identifier(required=True)
    product_id = Identifier()
    variant_id = Identifier()
    serial_id = Identifier()
    sku = String(max_length=100)
    quantity = Integer(required=True, min_value=1)
    added_by = Identifier()
    added_at = DateTime()


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@warehouse.aggregate
class Package:
    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    folio = String(required=True, max_length=50)
    barcode = String(max_length=100)
    status = String(
        max_length=50,
        choices=PackageStatus,
        default=PackageStatus.OPEN.value,
    )
    weight_kg = Float(min_value=0)
    length_cm = Float(min_value=0)
    width_cm = Float(min_value=0)
    height_cm = Float(min_value=0)
    carrier = String(max_length=100)
    tracking_code = String(max_length=100)
    notes = Text()
    cancellation_reason = String(max_length=500)
    items = HasMany(PackageItem)

    created_by = Identifier()
    created_at = DateTime()
    closed_by = Identifier()
    closed_at = DateTime()
    labeled_at = DateTime()
    shipped_at = DateTime()
    cancelled_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        tenant_id: str,
        operation_id: str,
        folio: str,
        notes: str | None = None,
        created_by: str | None = None,
    ):
        """Open a new package for a packing operation."""
        now = datetime.now(UTC)
        package = cls(
            tenant_id=tenant_id,
            operation_id=operation_id,
            folio=folio,
            barcode=folio.replace("-", ""),
            status=PackageStatus.OPEN.value,
            notes=notes,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        package.raise_(
            PackageCreated(
                package_id=str(package.id),
                tenant_id=str(tenant_id),
                operation_id=str(operation_id),
                folio=folio,
                barcode=package.barcode,
                created_by=str(created_by) if created_by else "",
                created_at=now,
            )
        )
        return package

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def total_units(self) -> int:
        return sum(i.quantity for i in (self.items or []))

    @property
    def volume_cm3(self) -> float | None:
        if self.length_cm and self.width_cm and self.height_cm:
            return round(self.length_cm * self.width_cm * self.height_cm, 2)
        return None

    @property
    def is_active(self) -> bool:
        """A package whose contents count against the fulfilled quantities."""
        return PackageStatus(self.status) != PackageStatus.CANCELLED

    def packed_quantity_for(self, operation_item_id: str) -> int:
        return sum(i.quantity for i in (self.items or []) if str(i.operation_item_id) == str(operation_item_id))

    def _assert_can_transition(self, target_status: PackageStatus) -> None:
        current = PackageStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _ensure_open(self, action: str) -> None:
        if PackageStatus(self.status) != PackageStatus.OPEN:
            raise ValidationError({"status": [f"Cannot {action} a {self.status} package"]})

    # -------------------------------------------------------------------
    # Contents
    # -------------------------------------------------------------------
    def pack_item(
        self,
        operation_item,
        quantity: int,
        available_quantity: int,
        serial_id: str | None = None,
        added_by: str | None = None,
    ) -> PackageItem:
        """Put ``quantity`` units of a fulfilled operation item into the package.

        ``available_quantity`` is what remains of the item's processed
        quantity after every other active package has taken its share.
        """
        self._ensure_open("add items to")
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be greater than zero"]})
        if quantity > available_quantity:
            raise InvalidStateError(
                f"Insufficient fulfilled quantity available to pack: "
                f"requested {quantity}, available {max(available_quantity, 0)}"
            )

        now = datetime.now(UTC)
        package_item = PackageItem(
            operation_item_id=str(operation_item.id),
            product_id=operation_item.product_id,
            variant_id=operation_item.variant_id,
            serial_id=serial_id or operation_item.serial_id,
            sku=operation_item.sku,
            quantity=quantity,
            added_by=added_by,
            added_at=now,
        )
        self.add_items(package_item)
        self.updated_at = now
        self.raise_(
            PackageItemAdded(
                package_id=str(self.id),
                tenant_id=str(self.tenant_id),
                operation_id=str(self.operation_id),
                package_item_id=str(package_item.id),
                operation_item_id=str(operation_item.id),
                quantity=quantity,
                added_by=str(added_by) if added_by else "",
                added_at=now,
            )
        )
        return package_item

    def unpack_item(self, package_item_id: str) -> PackageItem:
        """Take a line out of the package, freeing its quantity."""
        self._ensure_open("remove items from")
        package_item = next((i for i in (self.items or []) if str(i.id) == str(package_item_id)), None)
        if package_item is None:
            raise ObjectNotFoundError(f"Item {package_item_id} not found in package {self.id}")

        now = datetime.now(UTC)
        self.remove_items(package_item)
        self.updated_at = now
        self.raise_(
            PackageItemRemoved(
                package_id=str(self.id),
                tenant_id=str(self.tenant_id),
                operation_id=str(self.operation_id),
                package_item_id=str(package_item.id),
                operation_item_id=str(package_item.operation_item_id),
                quantity=package_item.quantity,
                removed_at=now,
            )
        )
        return package_item

    def update_details(self, changes: dict) -> None:
        """Change weight, dimensions, notes, carrier or tracking while open."""
        self._ensure_open("update")
        changes = {k: v for k, v in (changes or {}).items() if v is not None}
        if not changes:
            raise ValidationError({"fields": ["No fields to update"]})

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError({"fields": [f"Fields cannot be updated: {', '.join(sorted(unknown))}"]})

        now = datetime.now(UTC)
        for field_name, value in changes.items():
            setattr(self, field_name, value)
        self.updated_at = now
        self.raise_(
            PackageUpdated(
                package_id=str(self.id),
                tenant_id=str(self.tenant_id),
                changes=json.dumps(changes, default=str),
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def close(self, closed_by: str | None = None) -> None:
        """Seal the package. Contents and measures are frozen afterwards."""
        self._assert_can_transition(PackageStatus.CLOSED)
        if not self.items:
            raise ValidationError({"items": ["Cannot close an empty package"]})

        now = datetime.now(UTC)
        self.status = PackageStatus.CLOSED.value
        self.closed_by = closed_by
        self.closed_at = now
        self.updated_at = now
        self.raise_(
            PackageClosed(
                package_id=str(self.id),
                tenant_id=str(self.tenant_id),
                operation_id=str(self.operation_id),
                item_count=len(self.items),
                total_units=self.total_units,
                weight_kg=self.weight_kg,
                closed_by=str(closed_by) if closed_by else "",
                closed_at=now,
            )
        )

    def label(self, carrier: str | None = None, tracking_code: str | None = None) -> None:
        """Record carrier and tracking for a closed package.

        Values left as None keep what the package already has.
        """
        self._assert_can_transition(PackageStatus.LABELED)

        now = datetime.now(UTC)
        if carrier is not None:
            self.carrier = carrier
        if tracking_code is not None:
            self.tracking_code = tracking_code
        self.status = PackageStatus.LABELED.value
        self.labeled_at = now
        self.updated_at = now
        self.raise_(
            PackageLabeled(
                package_id=str(self.id),
                tenant_id=str(self.tenant_id),
                carrier=self.carrier or "",
                tracking_code=self.tracking_code or "",
                labeled_at=now,
            )
        )

    def ship(self, shipped_by: str | None = None) -> None:
        """Hand the package to the carrier."""
        self._assert_can_transition(PackageStatus.SHIPPED)

        now = datetime.now(UTC)
        self.status = PackageStatus.SHIPPED.value
        self.shipped_at = now
        self.updated_at = now
        self.raise_(
            PackageShipped(
                package_id=str(self.id),
                tenant_id=str(self.tenant_id),
                operation_id=str(self.operation_id),
                carrier=self.carrier or "",
                tracking_code=self.tracking_code or "",
                shipped_by=str(shipped_by) if shipped_by else "",
                shipped_at=now,
            )
        )

    def cancel(self, reason: str | None = None) -> bool:
        """Cancel an open or closed package, releasing its packed quantities.

        Cancelling an already-cancelled package changes nothing and returns
        False.
        """
        if PackageStatus(self.status) == PackageStatus.CANCELLED:
            return False
        self._assert_can_transition(PackageStatus.CANCELLED)

        now = datetime.now(UTC)
        reason = (reason or "").strip() or DEFAULT_CANCEL_REASON
        self.status = PackageStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_at = now
        self.updated_at = now
        self.raise_(
            PackageCancelled(
                package_id=str(self.id),
                tenant_id=str(self.tenant_id),
                operation_id=str(self.operation_id),
                reason=reason,
                released_units=self.total_units,
                cancelled_at=now,
            )
        )
        return True
