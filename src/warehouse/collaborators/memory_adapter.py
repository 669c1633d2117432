"""In-memory collaborator adapters — deterministic folios and chains.

Used in development and tests. The chain generator builds operations from
document lines registered with ``register_purchase_order`` or
``register_sale`` and persists them in the caller's Unit of Work.
"""

import threading

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from warehouse.collaborators import get_folio_generator
from warehouse.collaborators.port import ChainGeneratorPort, FolioGeneratorPort
from warehouse.operation.operation import Operation, OriginType

logger = structlog.get_logger(__name__)

FOLIO_PREFIXES = {
    "receiving": "REC",
    "quality_control": "QC",
    "putaway": "PUT",
    "picking": "PICK",
    "packing": "PACK",
    "shipping": "SHIP",
    "manual": "MAN",
    "package": "PKG",
}

PURCHASE_ORDER_CHAIN = ["receiving", "quality_control", "putaway"]
SALE_CHAIN = ["picking", "packing", "shipping"]


class InMemoryFolioGenerator(FolioGeneratorPort):
    """Sequential folios such as ``REC-000001``, counted per tenant and kind."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: dict[tuple[str, str], int] = {}

    def generate_folio(self, tenant_id: str, kind: str) -> str:
        prefix = FOLIO_PREFIXES.get(kind, kind[:4].upper())
        with self._lock:
            key = (str(tenant_id), kind)
            self._counters[key] = self._counters.get(key, 0) + 1
            sequence = self._counters[key]
        return f"{prefix}-{sequence:06d}"


class InMemoryChainGenerator(ChainGeneratorPort):
    """Creates linked operations from registered purchase orders and sales."""

    def __init__(self):
        self._documents: dict[tuple[str, str, str], dict] = {}

    def register_purchase_order(self, tenant_id: str, purchase_order_id: str, lines: list[dict], folio: str = ""):
        """Make a purchase order and its lines known to the generator."""
        self._documents[(str(tenant_id), "purchase_order", str(purchase_order_id))] = {
            "folio": folio,
            "lines": list(lines),
        }

    def register_sale(self, tenant_id: str, sale_id: str, lines: list[dict], folio: str = ""):
        """Make a sale and its lines known to the generator."""
        self._documents[(str(tenant_id), "sale", str(sale_id))] = {
            "folio": folio,
            "lines": list(lines),
        }

    def create_operations_from_purchase_order(self, purchase_order_id, branch_id, user_id, tenant_id) -> str:
        return self._create_chain(tenant_id, "purchase_order", purchase_order_id, branch_id, user_id, PURCHASE_ORDER_CHAIN)

    def create_operations_from_sale(self, sale_id, branch_id, user_id, tenant_id) -> str:
        return self._create_chain(tenant_id, "sale", sale_id, branch_id, user_id, SALE_CHAIN)

    def _create_chain(self, tenant_id, document_type, document_id, branch_id, user_id, steps) -> str:
        document = self._documents.get((str(tenant_id), document_type, str(document_id)))
        if document is None:
            raise ObjectNotFoundError(f"Document {document_type} {document_id} not found")

        repo = current_domain.repository_for(Operation)
        folios = get_folio_generator()
        predecessor = None
        created = []
        for operation_type in steps:
            folio = folios.generate_folio(tenant_id, operation_type)
            if predecessor is None:
                origin = {
                    "origin_type": document_type,
                    "origin_id": str(document_id),
                    "origin_folio": document["folio"],
                }
            else:
                origin = {
                    "origin_type": OriginType.OPERATION.value,
                    "origin_id": str(predecessor.id),
                    "origin_folio": predecessor.folio,
                }
            operation = Operation.create(
                tenant_id=tenant_id,
                branch_id=branch_id,
                folio=folio,
                operation_type=operation_type,
                items_data=document["lines"],
                created_by=user_id,
                **origin,
            )
            repo.add(operation)
            created.append(str(operation.id))
            predecessor = operation

        logger.info(
            "Operation chain generated",
            document_type=document_type,
            document_id=str(document_id),
            operation_ids=created,
        )
        return created[0]
