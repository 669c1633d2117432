"""Pydantic API schemas for the Warehouse domain.

These are the external API contracts — separate from domain commands.
The API layer translates between these schemas and domain commands, and
builds responses from aggregates and read models.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Request schemas: operations
# ---------------------------------------------------------------------------
class OperationItemRequest(BaseModel):
    product_id: str
    demanded_quantity: int = Field(ge=1)
    variant_id: str | None = None
    serial_id: str | None = None
    sku: str | None = None
    lot_number: str | None = None
    expires_on: date | None = None
    source_location_id: str | None = None
    destination_location_id: str | None = None
    notes: str | None = None


class CreateOperationRequest(BaseModel):
    branch_id: str
    operation_type: str
    items: list[OperationItemRequest]
    name: str | None = None
    origin_type: str | None = None
    origin_id: str | None = None
    origin_folio: str | None = None
    source_location_id: str | None = None
    destination_location_id: str | None = None
    assigned_to: str | None = None
    priority: int | None = None
    scheduled_date: datetime | None = None
    notes: str | None = None


class UpdateOperationRequest(BaseModel):
    name: str | None = None
    source_location_id: str | None = None
    destination_location_id: str | None = None
    assigned_to: str | None = None
    priority: int | None = None
    scheduled_date: datetime | None = None
    notes: str | None = None


class AssignOperationRequest(BaseModel):
    user_id: str


class ProcessItemRequest(BaseModel):
    quantity: int
    destination_location_id: str | None = None


class CompleteLineRequest(BaseModel):
    item_id: str
    quantity: int
    destination_location_id: str | None = None


class CompleteOperationRequest(BaseModel):
    items: list[CompleteLineRequest]


class CancelRequest(BaseModel):
    reason: str | None = None


class GenerateOperationsRequest(BaseModel):
    document_type: str
    document_id: str
    branch_id: str


# ---------------------------------------------------------------------------
# Request schemas: packages
# ---------------------------------------------------------------------------
class CreatePackageRequest(BaseModel):
    operation_id: str
    notes: str | None = None


class AddPackageItemRequest(BaseModel):
    operation_item_id: str
    quantity: int
    serial_id: str | None = None


class UpdatePackageRequest(BaseModel):
    weight_kg: float | None = None
    length_cm: float | None = None
    width_cm: float | None = None
    height_cm: float | None = None
    notes: str | None = None
    carrier: str | None = None
    tracking_code: str | None = None


class LabelPackageRequest(BaseModel):
    carrier: str | None = None
    tracking_code: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OperationIdResponse(BaseModel):
    operation_id: str


class PackageIdResponse(BaseModel):
    package_id: str


class PackageItemIdResponse(BaseModel):
    package_item_id: str


class StatusResponse(BaseModel):
    status: str


class OperationItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    variant_id: str | None = None
    serial_id: str | None = None
    sku: str | None = None
    demanded_quantity: int
    processed_quantity: int
    status: str
    lot_number: str | None = None
    expires_on: date | None = None
    source_location_id: str | None = None
    destination_location_id: str | None = None
    processed_by: str | None = None
    processed_at: datetime | None = None


class OperationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    branch_id: str
    folio: str
    name: str | None = None
    operation_type: str
    status: str
    origin_type: str
    origin_id: str | None = None
    origin_folio: str | None = None
    source_location_id: str | None = None
    destination_location_id: str | None = None
    assigned_to: str | None = None
    priority: int
    scheduled_date: datetime | None = None
    notes: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    total_demanded: int
    total_processed: int
    items: list[OperationItemResponse] = []


class ChainStepResponse(BaseModel):
    step: int
    operation: OperationResponse


class BoardRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    operation_id: str
    branch_id: str
    folio: str
    name: str | None = None
    operation_type: str
    status: str
    priority: int
    scheduled_date: datetime | None = None
    assigned_to: str | None = None
    item_count: int
    total_demanded: int
    total_processed: int
    created_at: datetime | None = None


class StatisticsRowResponse(BaseModel):
    operation_type: str
    status: str
    count: int
    total_items: int
    total_processed: int


class PackageItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    operation_item_id: str
    product_id: str | None = None
    variant_id: str | None = None
    serial_id: str | None = None
    sku: str | None = None
    quantity: int
    added_by: str | None = None
    added_at: datetime | None = None


class PackageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    operation_id: str
    folio: str
    barcode: str | None = None
    status: str
    weight_kg: float | None = None
    length_cm: float | None = None
    width_cm: float | None = None
    height_cm: float | None = None
    volume_cm3: float | None = None
    carrier: str | None = None
    tracking_code: str | None = None
    notes: str | None = None
    cancellation_reason: str | None = None
    total_units: int
    created_at: datetime | None = None
    closed_at: datetime | None = None
    labeled_at: datetime | None = None
    shipped_at: datetime | None = None
    cancelled_at: datetime | None = None
    items: list[PackageItemResponse] = []


class AvailableItemResponse(BaseModel):
    operation_item_id: str
    product_id: str
    variant_id: str | None = None
    sku: str | None = None
    serial_id: str | None = None
    demanded_quantity: int
    processed_quantity: int
    packed_quantity: int
    available_quantity: int


class PackingSummaryResponse(BaseModel):
    operation_id: str
    operation_folio: str
    total_packages: int
    packages_by_status: dict[str, int]
    units_processed: int
    units_packed: int
    units_pending: int


class LabelItemResponse(BaseModel):
    product_id: str | None = None
    sku: str | None = None
    variant_id: str | None = None
    serial_id: str | None = None
    quantity: int


class LabelResponse(BaseModel):
    folio: str
    barcode: str | None = None
    status: str
    weight_kg: float | None = None
    dimensions: str | None = None
    volume_cm3: float | None = None
    carrier: str | None = None
    tracking_code: str | None = None
    operation_folio: str
    origin_folio: str | None = None
    total_items: int
    total_units: int
    items: list[LabelItemResponse]
    created_at: datetime | None = None
