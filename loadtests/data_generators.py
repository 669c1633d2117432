"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names of the API's Pydantic request schemas and
pass the domain's validation rules (positive demanded quantities, known
operation types, non-negative package measures).
"""

import random
import uuid

from faker import Faker

fake = Faker()

OPERATION_TYPES = ["receiving", "quality_control", "putaway", "picking", "packing", "shipping"]
CARRIERS = ["DHL", "FedEx", "UPS", "Estafeta"]


# ---------- Tenancy ----------


def tenant_id() -> str:
    """A tenant per simulated user, so load spreads across tenants."""
    return f"tenant-lt-{uuid.uuid4().hex[:8]}"


def branch_id() -> str:
    return f"branch-{random.randint(1, 5)}"


def user_id(role: str = "worker") -> str:
    return f"{role}-{uuid.uuid4().hex[:6]}"


# ---------- Operations ----------


def valid_sku(prefix: str = "LT") -> str:
    """SKUs like 'LT-1A2B3C4D'."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def item_data(max_quantity: int = 20) -> dict:
    """Generate an OperationItemRequest payload."""
    return {
        "product_id": f"prod-{uuid.uuid4().hex[:8]}",
        "sku": valid_sku("ITEM"),
        "demanded_quantity": random.randint(1, max_quantity),
        "lot_number": f"LOT-{fake.bothify('??###').upper()}" if random.random() < 0.3 else None,
    }


def operation_data(operation_type: str | None = None, num_items: int | None = None, branch: str | None = None) -> dict:
    """Generate a CreateOperationRequest payload."""
    num_items = num_items or random.randint(1, 5)
    operation_type = operation_type or random.choice(OPERATION_TYPES)
    return {
        "branch_id": branch or branch_id(),
        "operation_type": operation_type,
        "name": f"{operation_type.replace('_', ' ').title()} {fake.word().capitalize()}"[:200],
        "priority": random.randint(1, 10),
        "notes": fake.sentence()[:200] if random.random() < 0.5 else None,
        "items": [item_data() for _ in range(num_items)],
    }


def cancel_reason() -> str:
    return random.choice(
        [
            "Supplier delay",
            "Customer withdrew the order",
            "Stock discrepancy found",
            "Duplicate operation",
        ]
    )


# ---------- Packaging ----------


def package_measures() -> dict:
    """Generate an UpdatePackageRequest payload with weight and dimensions."""
    return {
        "weight_kg": round(random.uniform(0.2, 25.0), 2),
        "length_cm": round(random.uniform(10.0, 80.0), 1),
        "width_cm": round(random.uniform(10.0, 60.0), 1),
        "height_cm": round(random.uniform(5.0, 50.0), 1),
    }


def label_data() -> dict:
    """Generate a LabelPackageRequest payload."""
    return {
        "carrier": random.choice(CARRIERS),
        "tracking_code": fake.bothify("TRK-########").upper(),
    }
