"""Operation domain events — immutable facts about warehouse operations.

All events are past tense, versioned, and carry the tenant and branch so the
operation board projection can be maintained without reloading the aggregate.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from warehouse.domain import warehouse


@warehouse.event(part_of="Operation")
class OperationCreated:
    """A warehouse operation was registered in draft."""

    __version__ = 1

    operation_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    branch_id = Identifier(required=True)
    folio = String(required=True)
    name = String()
    operation_type = String(required=True)
    status = String(required=True)
    origin_type = String()
    origin_id = String()
    origin_folio = String()
    assigned_to = String()
    priority = Integer(required=True)
    scheduled_date = DateTime()
    item_count = Integer(required=True)
    total_demanded = Integer(required=True)
    created_by = String()
    created_at = DateTime(required=True)


@warehouse.event(part_of="Operation")
class OperationDetailsUpdated:
    """Editable details of an operation changed."""

    __version__ = 1

    operation_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    changes = Text(required=True)  # JSON dict of changed fields
    assigned_to = String()
    priority = Integer(required=True)
    scheduled_date = DateTime()
    updated_at = DateTime(required=True)


@warehouse.event(part_of="Operation")
class OperationAssigned:
    """An operation was assigned to a warehouse user."""

    __version__ = 1

    operation_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    assigned_to = String(required=True)
    status = String(required=True)
    assigned_at = DateTime(required=True)


@warehouse.event(part_of="Operation")
class OperationStarted:
    """Work on an operation began."""

    __version__ = 1

    operation_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    assigned_to = String()
    status = String(required=True)
    started_at = DateTime(required=True)


@warehouse.event(part_of="Operation")
class ItemProcessed:
    """A quantity of an operation item was fulfilled."""

    __version__ = 1

    operation_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)
    processed_quantity = Integer(required=True)
    demanded_quantity = Integer(required=True)
    item_status = String(required=True)
    destination_location_id = String()
    processed_by = String()
    processed_at = DateTime(required=True)


@warehouse.event(part_of="Operation")
class ItemCancelled:
    """An operation item was cancelled and can no longer be processed."""

    __version__ = 1

    operation_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    item_id = Identifier(required=True)
    processed_quantity = Integer(required=True)
    cancelled_at = DateTime(required=True)


@warehouse.event(part_of="Operation")
class OperationProgressed:
    """The operation state was re-derived from its items."""

    __version__ = 1

    operation_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    total_processed = Integer(required=True)
    progressed_at = DateTime(required=True)


@warehouse.event(part_of="Operation")
class OperationCompleted:
    """Every item of the operation is completed or cancelled."""

    __version__ = 1

    operation_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    total_processed = Integer(required=True)
    completed_by = String()
    completed_at = DateTime(required=True)


@warehouse.event(part_of="Operation")
class OperationCancelled:
    """An operation was cancelled along with its open items."""

    __version__ = 1

    operation_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    cancelled_item_ids = Text(required=True)  # JSON list of item ids
    cancelled_by = String()
    cancelled_at = DateTime(required=True)
