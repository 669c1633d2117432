"""Application tests for chain generation from documents and chain resolution."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from warehouse.collaborators import get_chain_generator
from warehouse.operation.creation import CreateOperation
from warehouse.operation.generation import GenerateOperationsFromDocument
from warehouse.operation.operation import Operation, OriginType
from warehouse.operation.queries import get_chain

LINES = [
    {"product_id": "prod-1", "sku": "SKU-001", "demanded_quantity": 4},
    {"product_id": "prod-2", "sku": "SKU-002", "demanded_quantity": 2},
]


def _generate(document_type, document_id, tenant_id="tenant-1"):
    return current_domain.process(
        GenerateOperationsFromDocument(
            tenant_id=tenant_id,
            document_type=document_type,
            document_id=document_id,
            branch_id="branch-1",
            user_id="planner-1",
        ),
        asynchronous=False,
    )


def _operation(operation_id):
    return current_domain.repository_for(Operation).get_for_tenant("tenant-1", operation_id)


class TestGenerateFromPurchaseOrder:
    def test_creates_receiving_chain(self):
        get_chain_generator().register_purchase_order("tenant-1", "po-1", LINES, folio="PO-0001")
        first_id = _generate("purchase_order", "po-1")

        chain = get_chain("tenant-1", first_id)
        assert [s.operation.operation_type for s in chain] == ["receiving", "quality_control", "putaway"]
        assert [s.step for s in chain] == [0, 1, 2]

    def test_root_points_at_document(self):
        get_chain_generator().register_purchase_order("tenant-1", "po-1", LINES, folio="PO-0001")
        root = _operation(_generate("purchase_order", "po-1"))
        assert root.origin_type == OriginType.PURCHASE_ORDER.value
        assert str(root.origin_id) == "po-1"
        assert root.origin_folio == "PO-0001"

    def test_successors_point_at_predecessor(self):
        get_chain_generator().register_purchase_order("tenant-1", "po-1", LINES)
        chain = get_chain("tenant-1", _generate("purchase_order", "po-1"))
        root, quality, putaway = (s.operation for s in chain)
        assert quality.origin_type == OriginType.OPERATION.value
        assert str(quality.origin_id) == str(root.id)
        assert quality.origin_folio == root.folio
        assert str(putaway.origin_id) == str(quality.id)

    def test_every_step_copies_document_lines(self):
        get_chain_generator().register_purchase_order("tenant-1", "po-1", LINES)
        chain = get_chain("tenant-1", _generate("purchase_order", "po-1"))
        for step in chain:
            assert step.operation.total_demanded == 6


class TestGenerateFromSale:
    def test_creates_picking_chain(self):
        get_chain_generator().register_sale("tenant-1", "sale-1", LINES, folio="SO-0001")
        chain = get_chain("tenant-1", _generate("sale", "sale-1"))
        assert [s.operation.operation_type for s in chain] == ["picking", "packing", "shipping"]
        assert [s.operation.folio for s in chain] == ["PICK-000001", "PACK-000001", "SHIP-000001"]


class TestGenerationFailures:
    def test_unknown_document_not_found(self):
        with pytest.raises(ObjectNotFoundError):
            _generate("sale", "missing")

    def test_failed_generation_creates_nothing(self):
        with pytest.raises(ObjectNotFoundError):
            _generate("purchase_order", "missing")
        assert current_domain.repository_for(Operation)._dao.query.all().total == 0

    def test_unsupported_document_type_rejected(self):
        with pytest.raises(ValidationError):
            _generate("invoice", "inv-1")

    def test_documents_are_scoped_to_tenant(self):
        get_chain_generator().register_sale("tenant-1", "sale-1", LINES)
        with pytest.raises(ObjectNotFoundError):
            _generate("sale", "sale-1", tenant_id="tenant-2")


class TestResolveChain:
    def test_resolves_from_any_member(self):
        get_chain_generator().register_sale("tenant-1", "sale-1", LINES)
        first_id = _generate("sale", "sale-1")
        last_id = str(get_chain("tenant-1", first_id)[-1].operation.id)

        from_last = get_chain("tenant-1", last_id)
        assert [str(s.operation.id) for s in from_last] == [
            str(s.operation.id) for s in get_chain("tenant-1", first_id)
        ]

    def test_manual_operation_is_a_chain_of_one(self):
        operation_id = current_domain.process(
            CreateOperation(
                tenant_id="tenant-1",
                branch_id="branch-1",
                operation_type="receiving",
                items=json.dumps(LINES),
            ),
            asynchronous=False,
        )
        chain = get_chain("tenant-1", operation_id)
        assert len(chain) == 1
        assert chain[0].step == 0

    def test_groups_roots_of_the_same_document(self):
        get_chain_generator().register_purchase_order("tenant-1", "po-1", LINES)
        _generate("purchase_order", "po-1")
        second_root = _generate("purchase_order", "po-1")

        chain = get_chain("tenant-1", second_root)
        assert [s.step for s in chain] == [0, 0, 1, 1, 2, 2]

    def test_other_tenant_not_found(self):
        get_chain_generator().register_sale("tenant-1", "sale-1", LINES)
        first_id = _generate("sale", "sale-1")
        with pytest.raises(ObjectNotFoundError):
            get_chain("tenant-2", first_id)
