"""Fulfillment bounded context — Order-to-Dispatch and Warehouse Task Orchestration.

Owns the inventory ledger, the sales order state machine, the validation
pipeline that guards order release, and the warehouse work derived from
orders and receipts (putaway, picking, packing). Aggregates are standard
CQRS aggregates; the engine serializes access per SKU and per order.
"""

import structlog
from protean.domain import Domain

fulfillment = Domain(name="fulfillment")

logger = structlog.get_logger(__name__)
