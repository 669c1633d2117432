"""Warehouse bounded context — multi-step fulfillment operations.

Models the physical work a warehouse performs for a source document as a
chain of Operations (receiving → quality control → put-away, or picking →
packing → shipping). Items inside an Operation are fulfilled progressively,
and packing Operations own a packaging sub-workflow that groups fulfilled
quantities into shippable Packages. Every read and write is tenant-scoped.
"""

from protean.domain import Domain

from warehouse.utils.logging import configure_logging

configure_logging()

warehouse = Domain(name="warehouse")
