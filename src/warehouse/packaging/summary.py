"""Packaging read models — package lists, availability, summaries and labels.

Read-only queries over the Package and Operation aggregates. They never
mutate and are safe to call outside a Unit of Work.
"""

from protean.utils.globals import current_domain

from warehouse.operation.operation import Operation
from warehouse.packaging.package import Package, PackageStatus
from warehouse.tenancy import require_tenant


def list_packages(tenant_id: str, operation_id: str) -> list[Package]:
    """All packages of an operation, cancelled ones included, oldest first."""
    tenant_id = require_tenant(tenant_id)
    current_domain.repository_for(Operation).get_for_tenant(tenant_id, operation_id)
    return current_domain.repository_for(Package).for_operation(tenant_id, operation_id)


def get_package(tenant_id: str, package_id: str) -> Package:
    return current_domain.repository_for(Package).get_for_tenant(require_tenant(tenant_id), package_id)


def available_items(tenant_id: str, operation_id: str) -> list[dict]:
    """Per operation item: processed, packed and still available to pack."""
    tenant_id = require_tenant(tenant_id)
    op = current_domain.repository_for(Operation).get_for_tenant(tenant_id, operation_id)
    packed = current_domain.repository_for(Package).packed_quantities(tenant_id, operation_id)

    rows = []
    for item in op.items or []:
        processed = item.processed_quantity or 0
        packed_quantity = packed.get(str(item.id), 0)
        rows.append(
            {
                "operation_item_id": str(item.id),
                "product_id": item.product_id,
                "variant_id": item.variant_id,
                "sku": item.sku,
                "serial_id": item.serial_id,
                "demanded_quantity": item.demanded_quantity,
                "processed_quantity": processed,
                "packed_quantity": packed_quantity,
                "available_quantity": max(processed - packed_quantity, 0),
            }
        )
    return rows


def packing_summary(tenant_id: str, operation_id: str) -> dict:
    """Package counts per status and unit totals for an operation."""
    tenant_id = require_tenant(tenant_id)
    op = current_domain.repository_for(Operation).get_for_tenant(tenant_id, operation_id)
    packages = current_domain.repository_for(Package).for_operation(tenant_id, operation_id)

    by_status = {status.value: 0 for status in PackageStatus}
    for package in packages:
        by_status[package.status] += 1

    units_processed = op.total_processed
    units_packed = sum(p.total_units for p in packages if p.is_active)
    return {
        "operation_id": str(op.id),
        "operation_folio": op.folio,
        "total_packages": len(packages),
        "packages_by_status": by_status,
        "units_processed": units_processed,
        "units_packed": units_packed,
        "units_pending": max(units_processed - units_packed, 0),
    }


def generate_label(tenant_id: str, package_id: str) -> dict:
    """Assemble the data printed on a package's shipping label."""
    tenant_id = require_tenant(tenant_id)
    package = current_domain.repository_for(Package).get_for_tenant(tenant_id, package_id)
    op = current_domain.repository_for(Operation).get_for_tenant(tenant_id, package.operation_id)

    dimensions = None
    if package.length_cm and package.width_cm and package.height_cm:
        dimensions = f"{package.length_cm:g} x {package.width_cm:g} x {package.height_cm:g} cm"

    return {
        "folio": package.folio,
        "barcode": package.barcode,
        "status": package.status,
        "weight_kg": package.weight_kg,
        "dimensions": dimensions,
        "volume_cm3": package.volume_cm3,
        "carrier": package.carrier,
        "tracking_code": package.tracking_code,
        "operation_folio": op.folio,
        "origin_folio": op.origin_folio,
        "total_items": len(package.items or []),
        "total_units": package.total_units,
        "items": [
            {
                "product_id": item.product_id,
                "sku": item.sku,
                "variant_id": item.variant_id,
                "serial_id": item.serial_id,
                "quantity": item.quantity,
            }
            for item in package.items or []
        ],
        "created_at": package.created_at,
    }
