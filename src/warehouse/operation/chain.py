"""Chain resolver — stitches linked operations into one fulfillment chain.

Operations point at their predecessor through ``origin_type == "operation"``.
Starting from any operation the resolver climbs to the root, gathers every
root created from the same source document, then walks successors breadth
first. Read-only.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from warehouse.operation.operation import Operation, OriginType

logger = structlog.get_logger(__name__)


@dataclass
class ChainStep:
    """An operation in a chain with its distance from the root."""

    step: int
    operation: Operation


def _find_root(repo, tenant_id: str, operation: Operation) -> Operation:
    seen = {str(operation.id)}
    current = operation
    while current.origin_type == OriginType.OPERATION.value and current.origin_id:
        if str(current.origin_id) in seen:
            logger.warning("Cycle detected in operation chain", operation_id=str(current.id))
            break
        predecessor = repo._dao.query.filter(id=str(current.origin_id), tenant_id=tenant_id).all().first
        if predecessor is None:
            break
        seen.add(str(predecessor.id))
        current = predecessor
    return current


def resolve_chain(tenant_id: str, operation_id: str) -> list[ChainStep]:
    """Return every operation in the chain of ``operation_id``.

    Ordered by step (0 for roots) and then by creation time.
    """
    repo = current_domain.repository_for(Operation)
    start = repo.get_for_tenant(tenant_id, operation_id)
    root = _find_root(repo, str(tenant_id), start)

    roots = [root]
    if root.origin_type != OriginType.MANUAL.value and root.origin_id:
        roots = repo.find_by_origin(tenant_id, root.origin_type, root.origin_id) or [root]

    visited = {str(op.id) for op in roots}
    steps = [ChainStep(step=0, operation=op) for op in roots]
    frontier = [str(op.id) for op in roots]
    depth = 0
    while frontier:
        depth += 1
        next_frontier = []
        for successor in repo.find_successors(tenant_id, frontier):
            successor_id = str(successor.id)
            if successor_id in visited:
                continue
            visited.add(successor_id)
            steps.append(ChainStep(step=depth, operation=successor))
            next_frontier.append(successor_id)
        frontier = next_frontier

    steps.sort(key=lambda s: (s.step, s.operation.created_at))
    logger.debug("Operation chain resolved", operation_id=str(operation_id), length=len(steps))
    return steps
