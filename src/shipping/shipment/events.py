"""Shipment domain events: immutable facts about shipment state changes.

All events are past tense, versioned, and carry enough data for the read
models to update without loading the aggregate.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from shipping.domain import shipping


@shipping.event(part_of="Shipment")
class ShipmentCreated:
    """A shipment was booked from an accepted quote."""

    __version__ = "v1"

    shipment_id = Identifier(required=True)
    quote_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    service_mode = String()
    status = String(required=True)
    destinations = Text(required=True)  # JSON list of destination dicts
    destination_count = Integer(required=True)
    total_cartons = Float(default=0.0)
    total_chargeable_weight = Float(default=0.0)
    created_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShipmentStatusUpdated:
    """Staff moved the shipment to a new carrier/operations status."""

    __version__ = "v1"

    shipment_id = Identifier(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    updated_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class TrackingEventRecorded:
    """A tracking event was appended to the shipment's history."""

    __version__ = "v1"

    shipment_id = Identifier(required=True)
    status = String(required=True)
    location = String()
    description = String()
    occurred_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class InvoiceGenerated:
    """Staff issued the invoice for the shipment."""

    __version__ = "v1"

    shipment_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    invoice_number = String(required=True)
    amount = Float(required=True)
    issued_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class InvoicePaid:
    """The customer paid the shipment's invoice."""

    __version__ = "v1"

    shipment_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    invoice_number = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class AmazonIdsProvided:
    """The customer supplied Amazon Shipment/Reference IDs for warehouse legs."""

    __version__ = "v1"

    shipment_id = Identifier(required=True)
    destinations = Text(required=True)  # JSON list of {destination_id, amazon_shipment_id, amazon_reference_id}
    provided_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class DestinationWeightsUpdated:
    """Staff corrected the carton count or chargeable weight of warehouse legs."""

    __version__ = "v1"

    shipment_id = Identifier(required=True)
    destinations = Text(required=True)  # JSON list of {destination_id, cartons, chargeable_weight}
    total_cartons = Float(default=0.0)
    total_chargeable_weight = Float(default=0.0)
    updated_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class DestinationDelivered:
    """One warehouse leg was delivered."""

    __version__ = "v1"

    shipment_id = Identifier(required=True)
    destination_id = Identifier(required=True)
    fba_warehouse = String(required=True)
    delivered_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShipmentCancelled:
    """The shipment was cancelled before delivery."""

    __version__ = "v1"

    shipment_id = Identifier(required=True)
    reason = String(required=True)
    cancelled_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShipmentProgressChanged:
    """The derived, customer-facing progress of the shipment changed."""

    __version__ = "v1"

    shipment_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    raw_status = String(required=True)
    label = String(required=True)
    percent = Integer(default=0)
    missing_ids = Boolean(default=False)
    badge = String(required=True)
    steps = Text(required=True)  # JSON list of {id, label, completed}
    destinations = Text(required=True)  # JSON list of per-destination derivations
    occurred_at = DateTime(required=True)
