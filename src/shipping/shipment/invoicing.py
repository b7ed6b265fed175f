"""Shipment invoicing: commands and handler.

Staff generate the invoice; the customer pays it exactly once.
"""

import structlog
from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class GenerateInvoice:
    """Issue the invoice for a shipment."""

    shipment_id = Identifier(required=True)
    amount = Float(required=True, min_value=0.0)
    invoice_number = String(max_length=50)


@shipping.command(part_of="Shipment")
class PayInvoice:
    """Record the customer's payment of the shipment invoice."""

    shipment_id = Identifier(required=True)


@shipping.command_handler(part_of=Shipment)
class InvoicingHandler:
    @handle(GenerateInvoice)
    def generate_invoice(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.generate_invoice(
            amount=command.amount,
            invoice_number=command.invoice_number,
        )
        repo.add(shipment)
        return shipment.invoice.invoice_number

    @handle(PayInvoice)
    def pay_invoice(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.pay_invoice()
        repo.add(shipment)
        logger.info(
            "Shipment invoice paid",
            shipment_id=str(command.shipment_id),
            invoice_number=shipment.invoice.invoice_number,
            amount=shipment.invoice.amount,
        )
