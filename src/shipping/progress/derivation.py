"""Shipment status derivation: the single source of truth for progress.

Maps a ShipmentRecord to the customer-facing label, a progress percentage and
a "missing Amazon Shipment IDs" flag. Rules are evaluated in priority order and
the first match wins:

    1. Cancelled                               → Cancelled, 0
    2. Delivered (raw, or every leg delivered) → Delivered, 100
    3. No invoice yet                          → raw status, 20 if Awaiting Pickup else 10
    4. Invoice not paid                        → raw status, 20
    5. Invoice paid
       a. any leg without a shipment ID        → Missing Shipment IDs, 30
       b. all legs have IDs                    → In Progress, 40 if Awaiting Pickup else 80

Payment and ID completeness outrank the carrier's raw string, which lags
behind reality: a paid shipment with missing IDs is blocked no matter what the
carrier reports. A paid shipment with no legs has no missing IDs and lands on
5b, so paying never lowers the percentage.

The functions here are pure and total. They never raise, whatever the input.
"""

from dataclasses import dataclass, replace

from shipping.progress.records import (
    DestinationRecord,
    DisplayStatus,
    RawStatus,
    ShipmentRecord,
)

PERCENT_BOOKED = 10
PERCENT_AWAITING_PICKUP = 20
PERCENT_MISSING_IDS = 30
PERCENT_READY_FOR_PICKUP = 40
PERCENT_MOVING = 80
PERCENT_DELIVERED = 100


@dataclass(frozen=True)
class DerivedStatus:
    label: str
    percent: int
    missing_ids: bool = False


def _all_legs_delivered(destinations) -> bool:
    return bool(destinations) and all(d.is_delivered for d in destinations)


def derive_status(shipment: ShipmentRecord) -> DerivedStatus:
    """Derive the display status of a whole shipment."""
    raw = shipment.raw_status or ""
    destinations = tuple(shipment.destinations or ())
    passthrough = raw or DisplayStatus.UNKNOWN.value

    if raw == RawStatus.CANCELLED.value:
        return DerivedStatus(DisplayStatus.CANCELLED.value, 0)

    if raw == RawStatus.DELIVERED.value or _all_legs_delivered(destinations):
        return DerivedStatus(DisplayStatus.DELIVERED.value, PERCENT_DELIVERED)

    if shipment.invoice is None:
        if raw == RawStatus.AWAITING_PICKUP.value:
            return DerivedStatus(passthrough, PERCENT_AWAITING_PICKUP)
        return DerivedStatus(passthrough, PERCENT_BOOKED)

    if not shipment.invoice.is_paid:
        return DerivedStatus(passthrough, PERCENT_AWAITING_PICKUP)

    if any(not d.has_shipment_id for d in destinations):
        return DerivedStatus(DisplayStatus.MISSING_SHIPMENT_IDS.value, PERCENT_MISSING_IDS, missing_ids=True)

    if raw == RawStatus.AWAITING_PICKUP.value:
        return DerivedStatus(DisplayStatus.IN_PROGRESS.value, PERCENT_READY_FOR_PICKUP)
    return DerivedStatus(DisplayStatus.IN_PROGRESS.value, PERCENT_MOVING)


def derive_destination_status(shipment: ShipmentRecord, destination: DestinationRecord) -> DerivedStatus:
    """Derive the status of a single warehouse leg.

    Same rules as derive_status, evaluated as if the leg were the only
    destination: its own shipment ID and delivery status replace the aggregate
    checks while the shipment-level invoice and raw status are reused.
    """
    return derive_status(replace(shipment, destinations=(destination,)))


def derive_all(shipment: ShipmentRecord) -> tuple[DerivedStatus, dict[str, DerivedStatus]]:
    """Shipment-level status plus the status of every leg, keyed by leg id."""
    per_destination = {
        d.id: derive_destination_status(shipment, d) for d in (shipment.destinations or ())
    }
    return derive_status(shipment), per_destination
