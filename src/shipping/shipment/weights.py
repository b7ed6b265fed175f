"""Warehouse leg weights: command and handler.

Staff correct the carton count and chargeable weight of warehouse legs once
the freight has been weighed. Weights never change the derived progress.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class UpdateDestinationWeights:
    """Correct cartons and chargeable weight for one or more warehouse legs."""

    shipment_id = Identifier(required=True)
    destinations = Text(required=True)  # JSON list of {destination_id, cartons, chargeable_weight}


@shipping.command_handler(part_of=Shipment)
class WeightsHandler:
    @handle(UpdateDestinationWeights)
    def update_destination_weights(self, command):
        entries = json.loads(command.destinations) if isinstance(command.destinations, str) else command.destinations
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.update_destination_weights(entries)
        repo.add(shipment)

        logger.info(
            "Destination weights updated",
            shipment_id=str(command.shipment_id),
            legs=len(entries),
            total_chargeable_weight=sum(d.chargeable_weight or 0.0 for d in shipment.destinations),
        )
