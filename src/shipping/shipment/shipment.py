"""Shipment aggregate (CQRS): the core of the shipping domain.

A Shipment is booked when a customer accepts a quote. It carries one leg per
Amazon FBA destination warehouse, the invoice staff issue for it, the Amazon
Shipment/Reference IDs the customer supplies after paying, and the carrier's
tracking history.

Raw status state machine (staff-driven):
    BOOKING_CONFIRMED → AWAITING_PICKUP → IN_TRANSIT ⇄ CUSTOMS → OUT_FOR_DELIVERY → DELIVERED
    IN_TRANSIT / CUSTOMS → DELIVERED
    BOOKING_CONFIRMED / AWAITING_PICKUP / IN_TRANSIT / CUSTOMS → CANCELLED (via cancel)

Warehouse legs are delivered one at a time while the freight is moving
(IN_TRANSIT, CUSTOMS or OUT_FOR_DELIVERY). Once every leg is delivered the
shipment reads as Delivered and can no longer be cancelled.

The customer-facing progress is never stored on the aggregate. Every mutation
re-evaluates it with ``shipping.progress`` and raises ShipmentProgressChanged
when the result differs from before.
"""

import json
import re
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from shipping.domain import shipping
from shipping.progress import (
    DestinationRecord,
    DisplayStatus,
    InvoiceSummary,
    PaymentState,
    ProgressReport,
    RawStatus,
    ShipmentRecord,
    TrackingEventRecord,
    evaluate,
)
from shipping.shipment.events import (
    AmazonIdsProvided,
    DestinationDelivered,
    DestinationWeightsUpdated,
    InvoiceGenerated,
    InvoicePaid,
    ShipmentCancelled,
    ShipmentCreated,
    ShipmentProgressChanged,
    ShipmentStatusUpdated,
    TrackingEventRecorded,
)

# The aggregate's status values are the raw statuses the progress rules know.
ShipmentStatus = RawStatus


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class InvoiceStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"


class DeliveryStatus(Enum):
    PENDING = "pending"
    DELIVERED = "delivered"


_VALID_TRANSITIONS = {
    ShipmentStatus.BOOKING_CONFIRMED: {ShipmentStatus.AWAITING_PICKUP},
    ShipmentStatus.AWAITING_PICKUP: {ShipmentStatus.IN_TRANSIT},
    ShipmentStatus.IN_TRANSIT: {
        ShipmentStatus.CUSTOMS,
        ShipmentStatus.OUT_FOR_DELIVERY,
        ShipmentStatus.DELIVERED,
    },
    ShipmentStatus.CUSTOMS: {
        ShipmentStatus.IN_TRANSIT,
        ShipmentStatus.OUT_FOR_DELIVERY,
        ShipmentStatus.DELIVERED,
    },
    ShipmentStatus.OUT_FOR_DELIVERY: {ShipmentStatus.DELIVERED},
    ShipmentStatus.DELIVERED: set(),  # terminal
    ShipmentStatus.CANCELLED: set(),  # terminal
}

_CANCELLABLE_STATUSES = {
    ShipmentStatus.BOOKING_CONFIRMED,
    ShipmentStatus.AWAITING_PICKUP,
    ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.CUSTOMS,
}

# Legs can only arrive once the freight has left the origin.
_DELIVERABLE_STATUSES = {
    ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.CUSTOMS,
    ShipmentStatus.OUT_FOR_DELIVERY,
}

_REFERENCE_ID_PATTERN = re.compile(r"^[A-Z0-9]{8}$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@shipping.value_object(part_of="Shipment")
class ShipmentInvoice:
    """The invoice issued for a shipment. Replaced wholesale when paid."""

    invoice_number = String(required=True, max_length=50)
    amount = Float(required=True, min_value=0.0)
    status = String(
        max_length=20,
        choices=InvoiceStatus,
        default=InvoiceStatus.PENDING.value,
    )
    issued_at = DateTime()
    paid_at = DateTime()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@shipping.entity(part_of="Shipment")
class WarehouseDestination:
    """One FBA warehouse leg of the shipment."""

    fba_warehouse = String(required=True, max_length=50)
    amazon_shipment_id = String(max_length=50)
    amazon_reference_id = String(max_length=50)
    cartons = Integer(min_value=0, default=0)
    chargeable_weight = Float(min_value=0.0, default=0.0)
    delivery_status = String(
        max_length=20,
        choices=DeliveryStatus,
        default=DeliveryStatus.PENDING.value,
    )
    delivered_at = DateTime()


@shipping.entity(part_of="Shipment")
class TrackingEvent:
    """A carrier/operations tracking event."""

    status = String(required=True, max_length=100)
    location = String(max_length=200)
    description = String(max_length=500)
    occurred_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@shipping.aggregate
class Shipment:
    quote_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    service_mode = String(max_length=50)
    status = String(
        max_length=50,
        choices=ShipmentStatus,
        default=ShipmentStatus.BOOKING_CONFIRMED.value,
    )
    destinations = HasMany(WarehouseDestination)
    invoice = ValueObject(ShipmentInvoice)
    tracking_events = HasMany(TrackingEvent)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        quote_id: str,
        customer_id: str,
        destinations_data: list[dict],
        service_mode: str | None = None,
    ):
        """Book a shipment for an accepted quote."""
        if not destinations_data:
            raise ValidationError({"destinations": ["A shipment needs at least one destination warehouse"]})

        now = datetime.now(UTC)
        shipment = cls(
            quote_id=quote_id,
            customer_id=customer_id,
            service_mode=service_mode or "",
            status=ShipmentStatus.BOOKING_CONFIRMED.value,
            created_at=now,
            updated_at=now,
        )
        for data in destinations_data:
            shipment.add_destinations(
                WarehouseDestination(
                    fba_warehouse=data["fba_warehouse"],
                    cartons=data.get("cartons") or 0,
                    chargeable_weight=data.get("chargeable_weight") or 0.0,
                )
            )

        shipment.raise_(
            ShipmentCreated(
                shipment_id=str(shipment.id),
                quote_id=quote_id,
                customer_id=customer_id,
                service_mode=shipment.service_mode,
                status=shipment.status,
                destinations=json.dumps(
                    [
                        {
                            "destination_id": str(d.id),
                            "fba_warehouse": d.fba_warehouse,
                            "cartons": d.cartons,
                            "chargeable_weight": d.chargeable_weight,
                        }
                        for d in shipment.destinations
                    ]
                ),
                destination_count=len(shipment.destinations),
                total_cartons=float(sum(d.cartons or 0 for d in shipment.destinations)),
                total_chargeable_weight=float(sum(d.chargeable_weight or 0.0 for d in shipment.destinations)),
                created_at=now,
            )
        )
        shipment._publish_progress(previous=None, now=now)
        return shipment

    # -------------------------------------------------------------------
    # Read shape and progress
    # -------------------------------------------------------------------
    def to_record(self) -> ShipmentRecord:
        """Normalize the aggregate into the shape the progress rules consume."""
        invoice = None
        if self.invoice is not None:
            paid = self.invoice.status == InvoiceStatus.PAID.value
            invoice = InvoiceSummary(
                status=PaymentState.PAID if paid else PaymentState.UNPAID,
                amount=self.invoice.amount or 0.0,
            )
        return ShipmentRecord(
            id=str(self.id),
            raw_status=self.status or "",
            destinations=tuple(
                DestinationRecord(
                    id=str(d.id),
                    fba_warehouse=d.fba_warehouse,
                    amazon_shipment_id=d.amazon_shipment_id or None,
                    amazon_reference_id=d.amazon_reference_id or None,
                    cartons=d.cartons or 0,
                    chargeable_weight=d.chargeable_weight or 0.0,
                    delivery_status=d.delivery_status,
                )
                for d in (self.destinations or [])
            ),
            invoice=invoice,
            tracking_events=tuple(
                TrackingEventRecord(
                    status=e.status,
                    location=e.location or "",
                    description=e.description or "",
                    occurred_at=e.occurred_at,
                )
                for e in (self.tracking_events or [])
            ),
        )

    def progress(self) -> ProgressReport:
        return evaluate(self.to_record())

    def _publish_progress(self, previous: ProgressReport | None, now: datetime) -> None:
        report = self.progress()
        if report == previous:
            return
        self.raise_(
            ShipmentProgressChanged(
                shipment_id=str(self.id),
                customer_id=str(self.customer_id),
                raw_status=report.raw_status,
                label=report.status.label,
                percent=report.status.percent,
                missing_ids=report.status.missing_ids,
                badge=report.badge,
                steps=report.steps_json(),
                destinations=report.destinations_json(),
                occurred_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: ShipmentStatus) -> None:
        current = ShipmentStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _assert_not_cancelled(self, action: str) -> None:
        if self.status == ShipmentStatus.CANCELLED.value:
            raise ValidationError({"status": [f"Cannot {action} on a cancelled shipment"]})

    def _find_destination(self, destination_id: str) -> WarehouseDestination:
        destination = next((d for d in (self.destinations or []) if str(d.id) == destination_id), None)
        if destination is None:
            raise ValidationError({"destination_id": [f"Destination {destination_id} not found in this shipment"]})
        return destination

    # -------------------------------------------------------------------
    # Status and tracking (staff)
    # -------------------------------------------------------------------
    def _append_tracking_event(self, status: str, location: str | None, description: str | None, now) -> None:
        self.add_tracking_events(
            TrackingEvent(
                status=status,
                location=location or "",
                description=description or "",
                occurred_at=now,
            )
        )
        self.raise_(
            TrackingEventRecorded(
                shipment_id=str(self.id),
                status=status,
                location=location or "",
                description=description or "",
                occurred_at=now,
            )
        )

    def update_status(self, status: str, location: str | None = None, description: str | None = None) -> None:
        """Move the shipment to a new raw status and log it as a tracking event."""
        try:
            target = ShipmentStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown shipment status: {status}"]}) from None
        if target == ShipmentStatus.CANCELLED:
            raise ValidationError({"status": ["Use cancellation to cancel a shipment"]})
        self._assert_can_transition(target)

        previous = self.progress()
        previous_status = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            ShipmentStatusUpdated(
                shipment_id=str(self.id),
                previous_status=previous_status,
                status=target.value,
                updated_at=now,
            )
        )
        self._append_tracking_event(target.value, location, description or f"Status updated to {target.value}", now)
        self._publish_progress(previous, now)

    def record_tracking_event(
        self,
        status: str,
        location: str | None = None,
        description: str | None = None,
        occurred_at: datetime | None = None,
    ) -> None:
        """Append a tracking event without changing the shipment status.

        ``occurred_at`` backdates the event to when the carrier reported it;
        it defaults to now.
        """
        self._assert_not_cancelled("record tracking events")
        now = datetime.now(UTC)
        self.updated_at = now
        self._append_tracking_event(status, location, description, occurred_at or now)

    # -------------------------------------------------------------------
    # Invoicing
    # -------------------------------------------------------------------
    def generate_invoice(self, amount: float, invoice_number: str | None = None) -> None:
        """Issue the shipment's invoice (staff)."""
        self._assert_not_cancelled("generate an invoice")
        if self.invoice is not None:
            raise ValidationError({"invoice": ["An invoice has already been generated for this shipment"]})
        if amount is None or amount < 0:
            raise ValidationError({"amount": ["Invoice amount cannot be negative"]})

        previous = self.progress()
        now = datetime.now(UTC)
        self.invoice = ShipmentInvoice(
            invoice_number=invoice_number or f"INV-{uuid4().hex[:8].upper()}",
            amount=amount,
            status=InvoiceStatus.PENDING.value,
            issued_at=now,
        )
        self.updated_at = now
        self.raise_(
            InvoiceGenerated(
                shipment_id=str(self.id),
                customer_id=str(self.customer_id),
                invoice_number=self.invoice.invoice_number,
                amount=amount,
                issued_at=now,
            )
        )
        self._publish_progress(previous, now)

    def pay_invoice(self) -> None:
        """Record the customer's payment of the invoice."""
        self._assert_not_cancelled("pay an invoice")
        if self.invoice is None:
            raise ValidationError({"invoice": ["No invoice has been generated for this shipment"]})
        if self.invoice.status == InvoiceStatus.PAID.value:
            raise ValidationError({"invoice": ["Invoice has already been paid"]})

        previous = self.progress()
        now = datetime.now(UTC)
        self.invoice = ShipmentInvoice(
            invoice_number=self.invoice.invoice_number,
            amount=self.invoice.amount,
            status=InvoiceStatus.PAID.value,
            issued_at=self.invoice.issued_at,
            paid_at=now,
        )
        self.updated_at = now
        self.raise_(
            InvoicePaid(
                shipment_id=str(self.id),
                customer_id=str(self.customer_id),
                invoice_number=self.invoice.invoice_number,
                amount=self.invoice.amount,
                paid_at=now,
            )
        )
        self._publish_progress(previous, now)

    # -------------------------------------------------------------------
    # Amazon IDs (customer)
    # -------------------------------------------------------------------
    def provide_amazon_ids(self, entries: list[dict]) -> None:
        """Set or amend Amazon Shipment and Reference IDs per warehouse leg.

        Each entry names a destination and carries both IDs; the reference ID
        must be exactly 8 alphanumeric characters. All entries are validated
        before any is applied.
        """
        self._assert_not_cancelled("provide Amazon IDs")
        if self.invoice is None or self.invoice.status != InvoiceStatus.PAID.value:
            raise ValidationError({"invoice": ["Amazon IDs can only be provided after the invoice is paid"]})
        if not entries:
            raise ValidationError({"destinations": ["At least one destination must be provided"]})

        updates = []
        for entry in entries:
            destination = self._find_destination(str(entry.get("destination_id") or ""))
            shipment_id = (entry.get("amazon_shipment_id") or "").strip()
            reference_id = (entry.get("amazon_reference_id") or "").strip()
            if not shipment_id or not reference_id:
                raise ValidationError(
                    {
                        "destinations": [
                            f"Both Amazon Shipment ID and Amazon Reference ID are required for {destination.fba_warehouse}"
                        ]
                    }
                )
            if not _REFERENCE_ID_PATTERN.match(reference_id):
                raise ValidationError(
                    {"amazon_reference_id": ["Amazon Reference ID must be exactly 8 alphanumeric characters"]}
                )
            updates.append((destination, shipment_id, reference_id))

        previous = self.progress()
        now = datetime.now(UTC)
        for destination, shipment_id, reference_id in updates:
            destination.amazon_shipment_id = shipment_id
            destination.amazon_reference_id = reference_id
        self.updated_at = now
        self.raise_(
            AmazonIdsProvided(
                shipment_id=str(self.id),
                destinations=json.dumps(
                    [
                        {
                            "destination_id": str(destination.id),
                            "amazon_shipment_id": shipment_id,
                            "amazon_reference_id": reference_id,
                        }
                        for destination, shipment_id, reference_id in updates
                    ]
                ),
                provided_at=now,
            )
        )
        self._publish_progress(previous, now)

    # -------------------------------------------------------------------
    # Weights (staff)
    # -------------------------------------------------------------------
    def update_destination_weights(self, entries: list[dict]) -> None:
        """Correct cartons and chargeable weight of one or more warehouse legs.

        Each entry names a destination and carries ``cartons``,
        ``chargeable_weight`` or both; a missing value keeps the current one.
        """
        self._assert_not_cancelled("update weights")
        if not entries:
            raise ValidationError({"destinations": ["At least one destination must be provided"]})

        updates = []
        for entry in entries:
            destination = self._find_destination(str(entry.get("destination_id") or ""))
            cartons = entry.get("cartons")
            weight = entry.get("chargeable_weight")
            if cartons is None and weight is None:
                raise ValidationError(
                    {"destinations": [f"Provide cartons or chargeable weight for {destination.fba_warehouse}"]}
                )
            if cartons is not None and cartons < 0:
                raise ValidationError({"cartons": ["Cartons cannot be negative"]})
            if weight is not None and weight < 0:
                raise ValidationError({"chargeable_weight": ["Chargeable weight cannot be negative"]})
            updates.append((destination, cartons, weight))

        previous = self.progress()
        now = datetime.now(UTC)
        for destination, cartons, weight in updates:
            if cartons is not None:
                destination.cartons = int(cartons)
            if weight is not None:
                destination.chargeable_weight = float(weight)
        self.updated_at = now
        self.raise_(
            DestinationWeightsUpdated(
                shipment_id=str(self.id),
                destinations=json.dumps(
                    [
                        {
                            "destination_id": str(destination.id),
                            "cartons": destination.cartons,
                            "chargeable_weight": destination.chargeable_weight,
                        }
                        for destination, _, _ in updates
                    ]
                ),
                total_cartons=float(sum(d.cartons or 0 for d in self.destinations)),
                total_chargeable_weight=float(sum(d.chargeable_weight or 0.0 for d in self.destinations)),
                updated_at=now,
            )
        )
        self._publish_progress(previous, now)

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def record_destination_delivery(self, destination_id: str) -> None:
        """Mark one warehouse leg as delivered."""
        self._assert_not_cancelled("record a delivery")
        current = ShipmentStatus(self.status)
        if current not in _DELIVERABLE_STATUSES:
            raise ValidationError(
                {"status": [f"Cannot record a warehouse delivery while the shipment is {current.value}"]}
            )
        destination = self._find_destination(destination_id)
        if destination.delivery_status == DeliveryStatus.DELIVERED.value:
            raise ValidationError({"destination_id": [f"{destination.fba_warehouse} has already been delivered"]})

        previous = self.progress()
        now = datetime.now(UTC)
        destination.delivery_status = DeliveryStatus.DELIVERED.value
        destination.delivered_at = now
        self.updated_at = now
        self.raise_(
            DestinationDelivered(
                shipment_id=str(self.id),
                destination_id=str(destination.id),
                fba_warehouse=destination.fba_warehouse,
                delivered_at=now,
            )
        )
        self._publish_progress(previous, now)

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason: str) -> None:
        """Cancel the shipment (only before it is out for delivery)."""
        current = ShipmentStatus(self.status)
        if current not in _CANCELLABLE_STATUSES:
            raise ValidationError({"status": [f"Cannot cancel shipment in {current.value} state"]})

        previous = self.progress()
        if previous.status.label == DisplayStatus.DELIVERED.value:
            raise ValidationError({"status": ["Cannot cancel a shipment whose warehouse legs have all been delivered"]})
        now = datetime.now(UTC)
        self.status = ShipmentStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.updated_at = now
        self.raise_(
            ShipmentCancelled(
                shipment_id=str(self.id),
                reason=reason,
                cancelled_at=now,
            )
        )
        self._publish_progress(previous, now)
