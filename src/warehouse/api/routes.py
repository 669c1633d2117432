"""FastAPI routes for the Warehouse domain.

The caller's tenant and user come from the ``X-Tenant-ID`` and ``X-User-ID``
headers set by the authentication gateway in front of this service.
"""

import json

from fastapi import APIRouter, Header, Query
from protean.utils.globals import current_domain

from warehouse.api.schemas import (
    AddPackageItemRequest,
    AssignOperationRequest,
    AvailableItemResponse,
    BoardRowResponse,
    CancelRequest,
    ChainStepResponse,
    CompleteOperationRequest,
    CreateOperationRequest,
    CreatePackageRequest,
    GenerateOperationsRequest,
    LabelPackageRequest,
    LabelResponse,
    OperationIdResponse,
    OperationResponse,
    PackageIdResponse,
    PackageItemIdResponse,
    PackageResponse,
    PackingSummaryResponse,
    ProcessItemRequest,
    StatisticsRowResponse,
    StatusResponse,
    UpdateOperationRequest,
    UpdatePackageRequest,
)
from warehouse.operation.assignment import AssignOperation, StartOperation
from warehouse.operation.cancellation import CancelOperation
from warehouse.operation.creation import CreateOperation
from warehouse.operation.generation import GenerateOperationsFromDocument
from warehouse.operation.processing import CancelItem, CompleteOperation, ProcessItem
from warehouse.operation.queries import get_chain, get_operation, list_operations
from warehouse.operation.repository import OperationFilter
from warehouse.operation.updating import UpdateOperation
from warehouse.packaging.contents import AddPackageItem, RemovePackageItem
from warehouse.packaging.creation import CreatePackage
from warehouse.packaging.lifecycle import (
    CancelPackage,
    ClosePackage,
    LabelPackage,
    ShipPackage,
    UpdatePackage,
)
from warehouse.packaging.summary import (
    available_items,
    generate_label,
    get_package,
    list_packages,
    packing_summary,
)
from warehouse.projections.reports import get_kanban_summary, get_statistics, list_pending

# ---------------------------------------------------------------------------
# Operation Router
# ---------------------------------------------------------------------------
operation_router = APIRouter(prefix="/operations", tags=["operations"])


@operation_router.post("", status_code=201, response_model=OperationIdResponse)
async def create_operation(
    body: CreateOperationRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> OperationIdResponse:
    """Register a new operation in draft."""
    command = CreateOperation(
        tenant_id=x_tenant_id,
        branch_id=body.branch_id,
        operation_type=body.operation_type,
        items=json.dumps([item.model_dump(mode="json", exclude_none=True) for item in body.items]),
        name=body.name,
        origin_type=body.origin_type,
        origin_id=body.origin_id,
        origin_folio=body.origin_folio,
        source_location_id=body.source_location_id,
        destination_location_id=body.destination_location_id,
        assigned_to=body.assigned_to,
        priority=body.priority,
        scheduled_date=body.scheduled_date,
        notes=body.notes,
        user_id=x_user_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return OperationIdResponse(operation_id=result)


@operation_router.get("", response_model=list[OperationResponse])
async def list_all_operations(
    x_tenant_id: str = Header(),
    branch_id: str | None = None,
    operation_type: str | None = None,
    status: list[str] | None = Query(default=None),
    assigned_to: str | None = None,
    origin_type: str | None = None,
    origin_id: str | None = None,
    limit: int | None = Query(default=None, ge=1),
) -> list[OperationResponse]:
    """List operations by priority, newest first within a priority."""
    filters = OperationFilter(
        branch_id=branch_id,
        operation_type=operation_type,
        statuses=status or [],
        assigned_to=assigned_to,
        origin_type=origin_type,
        origin_id=origin_id,
        limit=limit,
    )
    return [OperationResponse.model_validate(op) for op in list_operations(x_tenant_id, filters)]


@operation_router.post("/generate", status_code=201, response_model=OperationIdResponse)
async def generate_operations(
    body: GenerateOperationsRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> OperationIdResponse:
    """Create the operation chain for a purchase order or sale."""
    command = GenerateOperationsFromDocument(
        tenant_id=x_tenant_id,
        document_type=body.document_type,
        document_id=body.document_id,
        branch_id=body.branch_id,
        user_id=x_user_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return OperationIdResponse(operation_id=result)


@operation_router.get("/pending", response_model=list[BoardRowResponse])
async def pending_operations(x_tenant_id: str = Header(), branch_id: str | None = None) -> list[BoardRowResponse]:
    return [BoardRowResponse.model_validate(row) for row in list_pending(x_tenant_id, branch_id)]


@operation_router.get("/statistics", response_model=list[StatisticsRowResponse])
async def operation_statistics(x_tenant_id: str = Header(), branch_id: str | None = None) -> list[StatisticsRowResponse]:
    return [StatisticsRowResponse(**row) for row in get_statistics(x_tenant_id, branch_id)]


@operation_router.get("/kanban", response_model=dict[str, dict[str, int]])
async def operation_kanban(x_tenant_id: str = Header(), branch_id: str | None = None) -> dict[str, dict[str, int]]:
    return get_kanban_summary(x_tenant_id, branch_id)


@operation_router.get("/{operation_id}", response_model=OperationResponse)
async def operation_detail(operation_id: str, x_tenant_id: str = Header()) -> OperationResponse:
    return OperationResponse.model_validate(get_operation(x_tenant_id, operation_id))


@operation_router.patch("/{operation_id}", response_model=OperationIdResponse)
async def update_operation(
    operation_id: str,
    body: UpdateOperationRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> OperationIdResponse:
    """Edit an operation's details. Only notes can change once it is closed."""
    command = UpdateOperation(
        tenant_id=x_tenant_id,
        operation_id=operation_id,
        changes=json.dumps(body.model_dump(mode="json", exclude_unset=True)),
        user_id=x_user_id,
    )
    current_domain.process(command, asynchronous=False)
    return OperationIdResponse(operation_id=operation_id)


@operation_router.put("/{operation_id}/assign", response_model=StatusResponse)
async def assign_operation(
    operation_id: str,
    body: AssignOperationRequest,
    x_tenant_id: str = Header(),
) -> StatusResponse:
    command = AssignOperation(tenant_id=x_tenant_id, operation_id=operation_id, user_id=body.user_id)
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@operation_router.put("/{operation_id}/start", response_model=StatusResponse)
async def start_operation(
    operation_id: str,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    command = StartOperation(tenant_id=x_tenant_id, operation_id=operation_id, user_id=x_user_id)
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@operation_router.put("/{operation_id}/items/{item_id}/process", response_model=StatusResponse)
async def process_item(
    operation_id: str,
    item_id: str,
    body: ProcessItemRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    """Add a processed quantity to one item. Returns the operation status."""
    command = ProcessItem(
        tenant_id=x_tenant_id,
        operation_id=operation_id,
        item_id=item_id,
        quantity=body.quantity,
        destination_location_id=body.destination_location_id,
        user_id=x_user_id,
    )
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@operation_router.put("/{operation_id}/items/{item_id}/cancel", response_model=StatusResponse)
async def cancel_item(
    operation_id: str,
    item_id: str,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    command = CancelItem(tenant_id=x_tenant_id, operation_id=operation_id, item_id=item_id, user_id=x_user_id)
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@operation_router.put("/{operation_id}/complete", response_model=StatusResponse)
async def complete_operation(
    operation_id: str,
    body: CompleteOperationRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    """Apply a batch of item quantities atomically."""
    command = CompleteOperation(
        tenant_id=x_tenant_id,
        operation_id=operation_id,
        items=json.dumps([line.model_dump() for line in body.items]),
        user_id=x_user_id,
    )
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@operation_router.put("/{operation_id}/cancel", response_model=StatusResponse)
async def cancel_operation(
    operation_id: str,
    body: CancelRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    command = CancelOperation(
        tenant_id=x_tenant_id,
        operation_id=operation_id,
        reason=body.reason,
        user_id=x_user_id,
    )
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@operation_router.get("/{operation_id}/chain", response_model=list[ChainStepResponse])
async def operation_chain(operation_id: str, x_tenant_id: str = Header()) -> list[ChainStepResponse]:
    """Every operation linked to this one, from the source document onwards."""
    return [
        ChainStepResponse(step=entry.step, operation=OperationResponse.model_validate(entry.operation))
        for entry in get_chain(x_tenant_id, operation_id)
    ]


@operation_router.get("/{operation_id}/packages", response_model=list[PackageResponse])
async def operation_packages(operation_id: str, x_tenant_id: str = Header()) -> list[PackageResponse]:
    return [PackageResponse.model_validate(p) for p in list_packages(x_tenant_id, operation_id)]


@operation_router.get("/{operation_id}/available-items", response_model=list[AvailableItemResponse])
async def operation_available_items(operation_id: str, x_tenant_id: str = Header()) -> list[AvailableItemResponse]:
    return [AvailableItemResponse(**row) for row in available_items(x_tenant_id, operation_id)]


@operation_router.get("/{operation_id}/packing-summary", response_model=PackingSummaryResponse)
async def operation_packing_summary(operation_id: str, x_tenant_id: str = Header()) -> PackingSummaryResponse:
    return PackingSummaryResponse(**packing_summary(x_tenant_id, operation_id))


# ---------------------------------------------------------------------------
# Package Router
# ---------------------------------------------------------------------------
package_router = APIRouter(prefix="/packages", tags=["packages"])


@package_router.post("", status_code=201, response_model=PackageIdResponse)
async def create_package(
    body: CreatePackageRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> PackageIdResponse:
    """Open a package for a packing operation."""
    command = CreatePackage(
        tenant_id=x_tenant_id,
        operation_id=body.operation_id,
        notes=body.notes,
        user_id=x_user_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return PackageIdResponse(package_id=result)


@package_router.get("/{package_id}", response_model=PackageResponse)
async def package_detail(package_id: str, x_tenant_id: str = Header()) -> PackageResponse:
    return PackageResponse.model_validate(get_package(x_tenant_id, package_id))


@package_router.patch("/{package_id}", response_model=PackageIdResponse)
async def update_package(
    package_id: str,
    body: UpdatePackageRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> PackageIdResponse:
    command = UpdatePackage(
        tenant_id=x_tenant_id,
        package_id=package_id,
        user_id=x_user_id,
        **body.model_dump(exclude_none=True),
    )
    current_domain.process(command, asynchronous=False)
    return PackageIdResponse(package_id=package_id)


@package_router.put("/{package_id}/items", status_code=201, response_model=PackageItemIdResponse)
async def add_package_item(
    package_id: str,
    body: AddPackageItemRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> PackageItemIdResponse:
    """Pack a fulfilled quantity of an operation item."""
    command = AddPackageItem(
        tenant_id=x_tenant_id,
        package_id=package_id,
        operation_item_id=body.operation_item_id,
        quantity=body.quantity,
        serial_id=body.serial_id,
        user_id=x_user_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return PackageItemIdResponse(package_item_id=result)


@package_router.delete("/{package_id}/items/{package_item_id}", response_model=PackageIdResponse)
async def remove_package_item(
    package_id: str,
    package_item_id: str,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> PackageIdResponse:
    command = RemovePackageItem(
        tenant_id=x_tenant_id,
        package_id=package_id,
        package_item_id=package_item_id,
        user_id=x_user_id,
    )
    current_domain.process(command, asynchronous=False)
    return PackageIdResponse(package_id=package_id)


@package_router.put("/{package_id}/close", response_model=StatusResponse)
async def close_package(
    package_id: str,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    command = ClosePackage(tenant_id=x_tenant_id, package_id=package_id, user_id=x_user_id)
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@package_router.put("/{package_id}/label", response_model=StatusResponse)
async def label_package(
    package_id: str,
    body: LabelPackageRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    command = LabelPackage(
        tenant_id=x_tenant_id,
        package_id=package_id,
        carrier=body.carrier,
        tracking_code=body.tracking_code,
        user_id=x_user_id,
    )
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@package_router.put("/{package_id}/ship", response_model=StatusResponse)
async def ship_package(
    package_id: str,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    command = ShipPackage(tenant_id=x_tenant_id, package_id=package_id, user_id=x_user_id)
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@package_router.put("/{package_id}/cancel", response_model=StatusResponse)
async def cancel_package(
    package_id: str,
    body: CancelRequest,
    x_tenant_id: str = Header(),
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    command = CancelPackage(
        tenant_id=x_tenant_id,
        package_id=package_id,
        reason=body.reason,
        user_id=x_user_id,
    )
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@package_router.get("/{package_id}/label", response_model=LabelResponse)
async def package_label(package_id: str, x_tenant_id: str = Header()) -> LabelResponse:
    """Data for the package's shipping label."""
    return LabelResponse(**generate_label(x_tenant_id, package_id))
