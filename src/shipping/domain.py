"""Shipping bounded context: freight shipments from booking to delivery.

Tracks shipments booked from accepted quotes: FBA warehouse legs, the
staff-issued invoice, customer payment, Amazon Shipment IDs and carrier
tracking. Uses CQRS (not event sourcing); customer-facing progress is derived
by the pure rules in ``shipping.progress`` and published to read models via
events.
"""

from protean.domain import Domain

from shipping.utils.logging import configure_logging, get_logger

configure_logging(log_dir="logs", log_file_prefix="freightdesk")

logger = get_logger(__name__)

shipping = Domain(name="shipping")
