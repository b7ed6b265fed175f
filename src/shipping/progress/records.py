"""Canonical read shapes consumed by the progress rules.

These are plain immutable records, produced once at the data-access boundary
(either from the Shipment aggregate or from a raw storage row) so that the
derivation rules never deal with optional fallbacks or storage field names.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RawStatus(Enum):
    """Carrier/operations status values the rules know about.

    The raw status is an open string; values outside this set are passed
    through untouched.
    """

    BOOKING_CONFIRMED = "Booking Confirmed"
    AWAITING_PICKUP = "Awaiting Pickup"
    IN_TRANSIT = "In Transit"
    CUSTOMS = "Customs"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class DisplayStatus(Enum):
    """Customer-facing labels produced by the rules themselves."""

    MISSING_SHIPMENT_IDS = "Missing Shipment IDs"
    IN_PROGRESS = "In Progress"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    UNKNOWN = "Unknown"


class PaymentState(Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


DELIVERED_LEG = "delivered"


@dataclass(frozen=True)
class DestinationRecord:
    """One FBA warehouse leg of a shipment."""

    id: str
    fba_warehouse: str = ""
    amazon_shipment_id: str | None = None
    amazon_reference_id: str | None = None
    cartons: float = 0
    chargeable_weight: float = 0.0
    delivery_status: str | None = None

    @property
    def has_shipment_id(self) -> bool:
        return bool(self.amazon_shipment_id)

    @property
    def is_delivered(self) -> bool:
        return self.delivery_status == DELIVERED_LEG


@dataclass(frozen=True)
class InvoiceSummary:
    status: PaymentState = PaymentState.UNPAID
    amount: float = 0.0

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentState.PAID


@dataclass(frozen=True)
class TrackingEventRecord:
    status: str
    location: str = ""
    description: str = ""
    occurred_at: datetime | None = None


@dataclass(frozen=True)
class ShipmentRecord:
    """Everything the rules need to know about a shipment."""

    id: str
    raw_status: str = ""
    destinations: tuple[DestinationRecord, ...] = ()
    invoice: InvoiceSummary | None = None
    tracking_events: tuple[TrackingEventRecord, ...] = ()

    @property
    def is_paid(self) -> bool:
        return self.invoice is not None and self.invoice.is_paid
