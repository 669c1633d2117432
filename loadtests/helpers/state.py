"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared
across users. State tracks ids returned by creation endpoints so follow-up
requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class OperationState:
    """Tracks state for a single simulated operation lifecycle."""

    operation_id: str | None = None
    folio: str | None = None
    current_status: str = "draft"
    # item id -> quantity still to process
    remaining: dict[str, int] = field(default_factory=dict)


@dataclass
class PackingState:
    """Tracks a packing operation and the packages opened for it."""

    operation_id: str | None = None
    item_ids: list[str] = field(default_factory=list)
    package_ids: list[str] = field(default_factory=list)
    packed_units: int = 0
    conflicts: int = 0
