"""Shipment progress: badge, progress bar and milestone timeline per shipment.

Stores the values derived by ``shipping.progress`` as published on
ShipmentProgressChanged; the projector never evaluates the rules itself.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.events import ShipmentProgressChanged
from shipping.shipment.shipment import Shipment


@shipping.projection
class ShipmentProgressView:
    shipment_id = Identifier(identifier=True, required=True)
    customer_id = Identifier(required=True)
    raw_status = String(required=True)
    label = String(required=True)
    percent = Integer(default=0)
    missing_ids = Boolean(default=False)
    badge = String()
    steps_json = Text()  # JSON list of {id, label, completed}
    updated_at = DateTime()


def shipments_for(customer_id: str | None = None) -> list[ShipmentProgressView]:
    """A customer's shipments, or every shipment when no customer is given."""
    query = current_domain.repository_for(ShipmentProgressView)._dao.query
    if customer_id:
        query = query.filter(customer_id=customer_id)
    return query.all().items


@shipping.projector(projector_for=ShipmentProgressView, aggregates=[Shipment])
class ShipmentProgressProjector:
    @on(ShipmentProgressChanged)
    def on_progress_changed(self, event):
        repo = current_domain.repository_for(ShipmentProgressView)
        try:
            view = repo.get(event.shipment_id)
        except ObjectNotFoundError:
            view = ShipmentProgressView(
                shipment_id=event.shipment_id,
                customer_id=event.customer_id,
                raw_status=event.raw_status,
                label=event.label,
            )
        view.raw_status = event.raw_status
        view.label = event.label
        view.percent = event.percent
        view.missing_ids = event.missing_ids
        view.badge = event.badge
        view.steps_json = event.steps
        view.updated_at = event.occurred_at
        repo.add(view)
