"""Operation board — one row per operation for pending lists, statistics and kanban."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.operation.events import (
    ItemProcessed,
    OperationAssigned,
    OperationCancelled,
    OperationCompleted,
    OperationCreated,
    OperationDetailsUpdated,
    OperationProgressed,
    OperationStarted,
)
from warehouse.operation.operation import Operation, OperationStatus


@warehouse.projection
class OperationBoardView:
    operation_id = Identifier(identifier=True, required=True)
    tenant_id = Identifier(required=True)
    branch_id = Identifier(required=True)
    folio = String(required=True)
    name = String(max_length=200)
    operation_type = String(required=True)
    status = String(required=True)
    priority = Integer(default=5)
    scheduled_date = DateTime()
    assigned_to = String()
    item_count = Integer(default=0)
    total_demanded = Integer(default=0)
    total_processed = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()


@warehouse.projector(projector_for=OperationBoardView, aggregates=[Operation])
class OperationBoardProjector:
    @on(OperationCreated)
    def on_operation_created(self, event):
        current_domain.repository_for(OperationBoardView).add(
            OperationBoardView(
                operation_id=event.operation_id,
                tenant_id=event.tenant_id,
                branch_id=event.branch_id,
                folio=event.folio,
                name=event.name,
                operation_type=event.operation_type,
                status=event.status,
                priority=event.priority,
                scheduled_date=event.scheduled_date,
                assigned_to=event.assigned_to or None,
                item_count=event.item_count,
                total_demanded=event.total_demanded,
                total_processed=0,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(OperationDetailsUpdated)
    def on_details_updated(self, event):
        repo = current_domain.repository_for(OperationBoardView)
        view = repo.get(event.operation_id)
        changes = json.loads(event.changes) if isinstance(event.changes, str) else event.changes
        if "name" in changes:
            view.name = changes["name"]
        view.assigned_to = event.assigned_to or None
        view.priority = event.priority
        view.scheduled_date = event.scheduled_date
        view.updated_at = event.updated_at
        repo.add(view)

    @on(OperationAssigned)
    def on_operation_assigned(self, event):
        repo = current_domain.repository_for(OperationBoardView)
        view = repo.get(event.operation_id)
        view.assigned_to = event.assigned_to
        view.status = event.status
        view.updated_at = event.assigned_at
        repo.add(view)

    @on(OperationStarted)
    def on_operation_started(self, event):
        repo = current_domain.repository_for(OperationBoardView)
        view = repo.get(event.operation_id)
        view.assigned_to = event.assigned_to or view.assigned_to
        view.status = event.status
        view.updated_at = event.started_at
        repo.add(view)

    @on(ItemProcessed)
    def on_item_processed(self, event):
        repo = current_domain.repository_for(OperationBoardView)
        view = repo.get(event.operation_id)
        view.total_processed = (view.total_processed or 0) + event.quantity
        view.updated_at = event.processed_at
        repo.add(view)

    @on(OperationProgressed)
    def on_operation_progressed(self, event):
        repo = current_domain.repository_for(OperationBoardView)
        view = repo.get(event.operation_id)
        view.status = event.status
        view.total_processed = event.total_processed
        view.updated_at = event.progressed_at
        repo.add(view)

    @on(OperationCompleted)
    def on_operation_completed(self, event):
        repo = current_domain.repository_for(OperationBoardView)
        view = repo.get(event.operation_id)
        view.status = OperationStatus.COMPLETED.value
        view.total_processed = event.total_processed
        view.updated_at = event.completed_at
        repo.add(view)

    @on(OperationCancelled)
    def on_operation_cancelled(self, event):
        repo = current_domain.repository_for(OperationBoardView)
        view = repo.get(event.operation_id)
        view.status = OperationStatus.CANCELLED.value
        view.updated_at = event.cancelled_at
        repo.add(view)
