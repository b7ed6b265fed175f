"""Active shipments: staff work list of shipments still in flight.

Rows exist from booking until the derived status becomes Delivered or
Cancelled, at which point they are removed.
"""

import json

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.progress import DisplayStatus
from shipping.shipment.events import (
    DestinationWeightsUpdated,
    ShipmentCreated,
    ShipmentProgressChanged,
    TrackingEventRecorded,
)
from shipping.shipment.shipment import Shipment

_CLOSED_LABELS = {DisplayStatus.DELIVERED.value, DisplayStatus.CANCELLED.value}


@shipping.projection
class ActiveShipmentsView:
    shipment_id = Identifier(identifier=True, required=True)
    customer_id = Identifier(required=True)
    display_status = String(required=True)
    badge = String()
    progress = Integer(default=0)
    missing_ids = Boolean(default=False)
    first_destination = String()
    destination_count = Integer(default=0)
    total_cartons = Float(default=0.0)
    total_chargeable_weight = Float(default=0.0)
    last_update = String(default="No updates yet")
    created_at = DateTime()
    updated_at = DateTime()


@shipping.projector(projector_for=ActiveShipmentsView, aggregates=[Shipment])
class ActiveShipmentsProjector:
    @on(ShipmentCreated)
    def on_shipment_created(self, event):
        legs = json.loads(event.destinations)
        current_domain.repository_for(ActiveShipmentsView).add(
            ActiveShipmentsView(
                shipment_id=event.shipment_id,
                customer_id=event.customer_id,
                display_status=event.status,
                first_destination=legs[0]["fba_warehouse"] if legs else "",
                destination_count=event.destination_count,
                total_cartons=event.total_cartons,
                total_chargeable_weight=event.total_chargeable_weight,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(ShipmentProgressChanged)
    def on_progress_changed(self, event):
        repo = current_domain.repository_for(ActiveShipmentsView)
        try:
            view = repo.get(event.shipment_id)
        except ObjectNotFoundError:
            return

        if event.label in _CLOSED_LABELS:
            repo.remove(view)
            return

        view.display_status = event.label
        view.badge = event.badge
        view.progress = event.percent
        view.missing_ids = event.missing_ids
        view.updated_at = event.occurred_at
        repo.add(view)

    @on(TrackingEventRecorded)
    def on_tracking_event_recorded(self, event):
        repo = current_domain.repository_for(ActiveShipmentsView)
        try:
            view = repo.get(event.shipment_id)
        except ObjectNotFoundError:
            return
        view.last_update = f"{event.occurred_at.date().isoformat()} - {event.description or 'Status update'}"
        view.updated_at = event.occurred_at
        repo.add(view)

    @on(DestinationWeightsUpdated)
    def on_weights_updated(self, event):
        repo = current_domain.repository_for(ActiveShipmentsView)
        try:
            view = repo.get(event.shipment_id)
        except ObjectNotFoundError:
            return
        view.total_cartons = event.total_cartons
        view.total_chargeable_weight = event.total_chargeable_weight
        view.updated_at = event.updated_at
        repo.add(view)
