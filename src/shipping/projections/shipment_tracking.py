"""Shipment tracking: current status/location and the tracking log."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.progress import RawStatus
from shipping.shipment.events import (
    ShipmentCancelled,
    ShipmentCreated,
    ShipmentStatusUpdated,
    TrackingEventRecorded,
)
from shipping.shipment.shipment import Shipment


@shipping.projection
class ShipmentTrackingView:
    shipment_id = Identifier(identifier=True, required=True)
    quote_id = Identifier(required=True)
    current_status = String(required=True)
    current_location = String()
    events_json = Text()  # JSON list of tracking events
    booked_at = DateTime()
    delivered_at = DateTime()


@shipping.projector(projector_for=ShipmentTrackingView, aggregates=[Shipment])
class ShipmentTrackingProjector:
    @on(ShipmentCreated)
    def on_shipment_created(self, event):
        current_domain.repository_for(ShipmentTrackingView).add(
            ShipmentTrackingView(
                shipment_id=event.shipment_id,
                quote_id=event.quote_id,
                current_status=event.status,
                events_json=json.dumps([]),
                booked_at=event.created_at,
            )
        )

    @on(ShipmentStatusUpdated)
    def on_status_updated(self, event):
        repo = current_domain.repository_for(ShipmentTrackingView)
        view = repo.get(event.shipment_id)
        view.current_status = event.status
        if event.status == RawStatus.DELIVERED.value:
            view.delivered_at = event.updated_at
        repo.add(view)

    @on(TrackingEventRecorded)
    def on_tracking_event_recorded(self, event):
        repo = current_domain.repository_for(ShipmentTrackingView)
        view = repo.get(event.shipment_id)
        if event.location:
            view.current_location = event.location

        existing = json.loads(view.events_json) if view.events_json else []
        existing.append(
            {
                "status": event.status,
                "location": event.location,
                "description": event.description,
                "occurred_at": event.occurred_at.isoformat() if event.occurred_at else None,
            }
        )
        view.events_json = json.dumps(existing)
        repo.add(view)

    @on(ShipmentCancelled)
    def on_shipment_cancelled(self, event):
        repo = current_domain.repository_for(ShipmentTrackingView)
        view = repo.get(event.shipment_id)
        view.current_status = RawStatus.CANCELLED.value
        repo.add(view)
