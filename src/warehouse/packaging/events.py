"""Package domain events — immutable facts about shipping packages."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from warehouse.domain import warehouse


@warehouse.event(part_of="Package")
class PackageCreated:
    """A package was opened for a packing operation."""

    __version__ = 1

    package_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    folio = String(required=True)
    barcode = String(required=True)
    created_by = String()
    created_at = DateTime(required=True)


@warehouse.event(part_of="Package")
class PackageItemAdded:
    """A fulfilled quantity of an operation item was put into a package."""

    __version__ = 1

    package_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    package_item_id = Identifier(required=True)
    operation_item_id = Identifier(required=True)
    quantity = Integer(required=True)
    added_by = String()
    added_at = DateTime(required=True)


@warehouse.event(part_of="Package")
class PackageItemRemoved:
    """A package line was taken out, freeing its quantity."""

    __version__ = 1

    package_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    package_item_id = Identifier(required=True)
    operation_item_id = Identifier(required=True)
    quantity = Integer(required=True)
    removed_at = DateTime(required=True)


@warehouse.event(part_of="Package")
class PackageUpdated:
    """Measures, notes or carrier details of an open package changed."""

    __version__ = 1

    package_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    changes = Text(required=True)  # JSON dict of changed fields
    updated_at = DateTime(required=True)


@warehouse.event(part_of="Package")
class PackageClosed:
    """A package was sealed; its contents are frozen."""

    __version__ = 1

    package_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    item_count = Integer(required=True)
    total_units = Integer(required=True)
    weight_kg = Float()
    closed_by = String()
    closed_at = DateTime(required=True)


@warehouse.event(part_of="Package")
class PackageLabeled:
    """A shipping label was assigned to a closed package."""

    __version__ = 1

    package_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    carrier = String()
    tracking_code = String()
    labeled_at = DateTime(required=True)


@warehouse.event(part_of="Package")
class PackageShipped:
    """A package left the warehouse."""

    __version__ = 1

    package_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    carrier = String()
    tracking_code = String()
    shipped_by = String()
    shipped_at = DateTime(required=True)


@warehouse.event(part_of="Package")
class PackageCancelled:
    """A package was cancelled; its packed quantities return to the pool."""

    __version__ = 1

    package_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    released_units = Integer(required=True)
    cancelled_at = DateTime(required=True)
