"""Amazon Shipment IDs: command and handler.

After paying, the customer supplies the Amazon Shipment ID and 8-character
Amazon Reference ID for every FBA warehouse leg. Until all legs have a
Shipment ID the shipment is shown as "Missing Shipment IDs".
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
class ProvideAmazonIds:
    """Set or amend Amazon IDs for one or more warehouse legs."""

    shipment_id = Identifier(required=True)
    destinations = Text(required=True)  # JSON list of {destination_id, amazon_shipment_id, amazon_reference_id}


@shipping.command_handler(part_of=Shipment)
class AmazonIdsHandler:
    @handle(ProvideAmazonIds)
    def provide_amazon_ids(self, command):
        entries = json.loads(command.destinations) if isinstance(command.destinations, str) else command.destinations
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.provide_amazon_ids(entries)
        repo.add(shipment)

        report = shipment.progress()
        logger.info(
            "Amazon IDs saved",
            shipment_id=str(command.shipment_id),
            legs=len(entries),
            missing_ids=report.status.missing_ids,
        )
