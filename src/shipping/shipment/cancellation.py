"""Shipment cancellation: command and handler.

Cancels a shipment that is not yet out for delivery.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment


@shipping.command(part_of="Shipment")
class CancelShipment:
    """Cancel a shipment before it is out for delivery."""

    shipment_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@shipping.command_handler(part_of=Shipment)
class CancelShipmentHandler:
    @handle(CancelShipment)
    def cancel_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.cancel(command.reason)
        repo.add(shipment)
