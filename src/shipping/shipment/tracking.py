"""Shipment status and tracking: commands and handler.

Staff move the shipment through its carrier statuses and log tracking events.
"""

from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment


@shipping.command(part_of="Shipment")
class UpdateShipmentStatus:
    """Move a shipment to a new carrier/operations status."""

    shipment_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    location = String(max_length=200)
    description = String(max_length=500)


@shipping.command(part_of="Shipment")
class RecordTrackingEvent:
    """Append a tracking event without changing the status."""

    shipment_id = Identifier(required=True)
    status = String(required=True, max_length=100)
    location = String(max_length=200)
    description = String(max_length=500)
    occurred_at = DateTime()  # when the carrier reported it; defaults to now


@shipping.command_handler(part_of=Shipment)
class TrackingHandler:
    @handle(UpdateShipmentStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.update_status(
            status=command.status,
            location=command.location,
            description=command.description,
        )
        repo.add(shipment)

    @handle(RecordTrackingEvent)
    def record_tracking_event(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.record_tracking_event(
            status=command.status,
            location=command.location,
            description=command.description,
            occurred_at=command.occurred_at,
        )
        repo.add(shipment)
