"""Normalization of loosely-shaped shipment rows into ShipmentRecord.

Rows arrive from storage, webhooks or the browser with camelCase or snake_case
keys, several spellings of the same status and quantities spread over
``actual*``/``estimated*`` fields. This module resolves all of that once, so
nothing downstream repeats fallback chains.

Normalization never raises: unusable values degrade to empty/zero.
"""

from collections.abc import Mapping
from datetime import datetime

from shipping.progress.records import (
    DestinationRecord,
    InvoiceSummary,
    PaymentState,
    RawStatus,
    ShipmentRecord,
    TrackingEventRecord,
)

_STATUS_ALIASES = {
    "booking confirmed": RawStatus.BOOKING_CONFIRMED,
    "awaiting pickup": RawStatus.AWAITING_PICKUP,
    "waiting for pickup": RawStatus.AWAITING_PICKUP,
    "in transit": RawStatus.IN_TRANSIT,
    "customs": RawStatus.CUSTOMS,
    "customs clearance": RawStatus.CUSTOMS,
    "customs cleared": RawStatus.CUSTOMS,
    "out for delivery": RawStatus.OUT_FOR_DELIVERY,
    "delivered": RawStatus.DELIVERED,
    "cancelled": RawStatus.CANCELLED,
    "canceled": RawStatus.CANCELLED,
}


def _first(row: Mapping, *keys, default=None):
    """Return the first truthy value among ``keys``."""
    for key in keys:
        value = row.get(key)
        if value:
            return value
    return default


def _number(value) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int | float):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _mappings(value) -> list[Mapping]:
    if not isinstance(value, list | tuple):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def canonical_status(value) -> str:
    """Canonicalize a raw status spelling; unknown values pass through stripped."""
    text = _text(value)
    key = " ".join(text.replace("-", " ").replace("_", " ").lower().split())
    status = _STATUS_ALIASES.get(key)
    return status.value if status else text


def _destination_id(row: Mapping) -> str:
    return _text(_first(row, "id", "destinationId", "destination_id"))


def _positional_id(position: int, taken) -> str:
    number = position + 1
    while f"warehouse-{number}" in taken:
        number += 1
    return f"warehouse-{number}"


def normalize_destination(row: Mapping, position: int = 0, taken=frozenset()) -> DestinationRecord:
    """Normalize one warehouse leg.

    Legs without an id get ``warehouse-<n>`` from their position, skipping
    any id already in ``taken``.
    """
    delivery_status = _text(_first(row, "deliveryStatus", "delivery_status")).lower() or None
    return DestinationRecord(
        id=_destination_id(row) or _positional_id(position, taken),
        fba_warehouse=_text(_first(row, "fbaWarehouse", "fba_warehouse", "warehouse")),
        amazon_shipment_id=_text(_first(row, "amazonShipmentId", "amazon_shipment_id")) or None,
        amazon_reference_id=_text(_first(row, "amazonReferenceId", "amazon_reference_id")) or None,
        cartons=_number(_first(row, "actualCartons", "cartons", "estimatedCartons", default=0)),
        chargeable_weight=_number(
            _first(
                row,
                "chargeableWeight",
                "chargeable_weight",
                "actualWeight",
                "estimatedWeight",
                "weight",
                default=0,
            )
        ),
        delivery_status=delivery_status,
    )


def _normalize_destinations(rows: list[Mapping]) -> tuple[DestinationRecord, ...]:
    taken = {_destination_id(row) for row in rows} - {""}
    destinations = []
    for position, row in enumerate(rows):
        destination = normalize_destination(row, position, taken)
        taken.add(destination.id)
        destinations.append(destination)
    return tuple(destinations)


def normalize_invoice(row) -> InvoiceSummary | None:
    if not isinstance(row, Mapping):
        return None
    paid = _text(row.get("status")).lower() == "paid"
    return InvoiceSummary(
        status=PaymentState.PAID if paid else PaymentState.UNPAID,
        amount=_number(_first(row, "amount", "total", default=0)),
    )


def _timestamp(value) -> datetime | None:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(_text(value))
    except ValueError:
        return None


def normalize_tracking_event(row: Mapping) -> TrackingEventRecord:
    return TrackingEventRecord(
        status=_text(row.get("status")),
        location=_text(row.get("location")),
        description=_text(row.get("description")),
        occurred_at=_timestamp(_first(row, "occurredAt", "occurred_at", "date")),
    )


def normalize_shipment(row: Mapping) -> ShipmentRecord:
    """Build the canonical ShipmentRecord from a raw shipment row."""
    if not isinstance(row, Mapping):
        row = {}
    return ShipmentRecord(
        id=_text(row.get("id")),
        raw_status=canonical_status(_first(row, "rawStatus", "raw_status", "status", default="")),
        destinations=_normalize_destinations(_mappings(row.get("destinations"))),
        invoice=normalize_invoice(row.get("invoice")),
        tracking_events=tuple(
            normalize_tracking_event(e)
            for e in _mappings(_first(row, "trackingEvents", "tracking_events", default=[]))
        ),
    )
