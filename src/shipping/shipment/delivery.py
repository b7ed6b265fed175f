"""Warehouse leg delivery: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment


@shipping.command(part_of="Shipment")
class RecordDestinationDelivery:
    """Record that one FBA warehouse leg was delivered."""

    shipment_id = Identifier(required=True)
    destination_id = Identifier(required=True)


@shipping.command_handler(part_of=Shipment)
class DeliveryHandler:
    @handle(RecordDestinationDelivery)
    def record_destination_delivery(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.record_destination_delivery(str(command.destination_id))
        repo.add(shipment)
