"""Shipment creation: command and handler.

A shipment is booked when the customer accepts a quote; one destination leg is
created per FBA warehouse on the quote.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class CreateShipment:
    """Book a shipment for an accepted quote."""

    quote_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    service_mode = String(max_length=50)
    destinations = Text(required=True)  # JSON list of {fba_warehouse, cartons, chargeable_weight}


@shipping.command_handler(part_of=Shipment)
class CreateShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        destinations_data = (
            json.loads(command.destinations) if isinstance(command.destinations, str) else command.destinations
        )
        shipment = Shipment.create(
            quote_id=command.quote_id,
            customer_id=command.customer_id,
            destinations_data=destinations_data,
            service_mode=command.service_mode,
        )
        current_domain.repository_for(Shipment).add(shipment)
        logger.info(
            "Shipment booked from accepted quote",
            shipment_id=str(shipment.id),
            quote_id=str(command.quote_id),
            destination_count=len(destinations_data),
        )
        return str(shipment.id)
