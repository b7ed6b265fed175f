"""Warehouse progress: one card per FBA warehouse leg of a shipment."""

import json

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.events import (
    AmazonIdsProvided,
    DestinationDelivered,
    DestinationWeightsUpdated,
    ShipmentCreated,
    ShipmentProgressChanged,
)
from shipping.shipment.shipment import DeliveryStatus, Shipment


@shipping.projection
class WarehouseProgressView:
    destination_id = Identifier(identifier=True, required=True)
    shipment_id = Identifier(required=True)
    fba_warehouse = String(required=True)
    amazon_shipment_id = String()
    amazon_reference_id = String()
    cartons = Integer(default=0)
    chargeable_weight = Float(default=0.0)
    delivery_status = String(default=DeliveryStatus.PENDING.value)
    label = String()
    percent = Integer(default=0)
    missing_id = Boolean(default=False)
    updated_at = DateTime()


def warehouses_for(shipment_id: str) -> list[WarehouseProgressView]:
    repo = current_domain.repository_for(WarehouseProgressView)
    return repo._dao.query.filter(shipment_id=shipment_id).all().items


@shipping.projector(projector_for=WarehouseProgressView, aggregates=[Shipment])
class WarehouseProgressProjector:
    @on(ShipmentCreated)
    def on_shipment_created(self, event):
        repo = current_domain.repository_for(WarehouseProgressView)
        for leg in json.loads(event.destinations):
            repo.add(
                WarehouseProgressView(
                    destination_id=leg["destination_id"],
                    shipment_id=event.shipment_id,
                    fba_warehouse=leg["fba_warehouse"],
                    cartons=leg.get("cartons") or 0,
                    chargeable_weight=leg.get("chargeable_weight") or 0.0,
                    updated_at=event.created_at,
                )
            )

    @on(ShipmentProgressChanged)
    def on_progress_changed(self, event):
        repo = current_domain.repository_for(WarehouseProgressView)
        for leg in json.loads(event.destinations):
            try:
                view = repo.get(leg["destination_id"])
            except ObjectNotFoundError:
                continue
            view.label = leg["label"]
            view.percent = leg["percent"]
            view.missing_id = leg["missing_id"]
            view.updated_at = event.occurred_at
            repo.add(view)

    @on(AmazonIdsProvided)
    def on_amazon_ids_provided(self, event):
        repo = current_domain.repository_for(WarehouseProgressView)
        for leg in json.loads(event.destinations):
            view = repo.get(leg["destination_id"])
            view.amazon_shipment_id = leg["amazon_shipment_id"]
            view.amazon_reference_id = leg["amazon_reference_id"]
            view.updated_at = event.provided_at
            repo.add(view)

    @on(DestinationDelivered)
    def on_destination_delivered(self, event):
        repo = current_domain.repository_for(WarehouseProgressView)
        view = repo.get(event.destination_id)
        view.delivery_status = DeliveryStatus.DELIVERED.value
        view.updated_at = event.delivered_at
        repo.add(view)

    @on(DestinationWeightsUpdated)
    def on_weights_updated(self, event):
        repo = current_domain.repository_for(WarehouseProgressView)
        for leg in json.loads(event.destinations):
            view = repo.get(leg["destination_id"])
            view.cartons = leg["cartons"]
            view.chargeable_weight = leg["chargeable_weight"]
            view.updated_at = event.updated_at
            repo.add(view)
