"""PackingSession domain events."""

from protean.fields import DateTime, Identifier, String, Text

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="PackingSession")
class PackSessionOpened:
    __version__ = 1

    order_id = Identifier(required=True)
    line_skus = Text(required=True)  # JSON list of strings
    opened_at = DateTime(required=True)


@fulfillment.event(part_of="PackingSession")
class PackItemToggled:
    __version__ = 1

    order_id = Identifier(required=True)
    sku = String(required=True)
    verified = String(required=True)  # "true" / "false"
    toggled_at = DateTime(required=True)


@fulfillment.event(part_of="PackingSession")
class PackSessionClosed:
    """The session ended, either by shipping or by being discarded."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(required=True)  # Shipped or Discarded
    closed_at = DateTime(required=True)
