"""Collaborator ports — folio and chain generation.

Domain code programs against these interfaces; adapters are selected through
configuration (see ``warehouse.collaborators``).
"""

from abc import ABC, abstractmethod


class FolioGeneratorPort(ABC):
    """Allocates human-readable sequential identifiers."""

    @abstractmethod
    def generate_folio(self, tenant_id: str, kind: str) -> str:
        """Return the next folio for ``kind`` within the tenant.

        ``kind`` is an operation type or ``"package"``. Folios are unique per
        tenant and kind, and increase monotonically.
        """
        ...


class ChainGeneratorPort(ABC):
    """Creates the linked operations derived from a source document."""

    @abstractmethod
    def create_operations_from_purchase_order(
        self,
        purchase_order_id: str,
        branch_id: str,
        user_id: str | None,
        tenant_id: str,
    ) -> str:
        """Create receiving → quality control → put-away operations.

        Runs inside the caller's transaction and returns the id of the first
        operation in the chain.
        """
        ...

    @abstractmethod
    def create_operations_from_sale(
        self,
        sale_id: str,
        branch_id: str,
        user_id: str | None,
        tenant_id: str,
    ) -> str:
        """Create picking → packing → shipping operations.

        Runs inside the caller's transaction and returns the id of the first
        operation in the chain.
        """
        ...
