"""Integration tests for shipping read models."""

import json
from datetime import UTC, datetime

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from shipping.projections.active_shipments import ActiveShipmentsView
from shipping.projections.shipment_progress import ShipmentProgressView, shipments_for
from shipping.projections.shipment_tracking import ShipmentTrackingView
from shipping.projections.warehouse_progress import WarehouseProgressView, warehouses_for
from shipping.shipment.amazon_ids import ProvideAmazonIds
from shipping.shipment.cancellation import CancelShipment
from shipping.shipment.creation import CreateShipment
from shipping.shipment.delivery import RecordDestinationDelivery
from shipping.shipment.invoicing import GenerateInvoice, PayInvoice
from shipping.shipment.shipment import DeliveryStatus, Shipment
from shipping.shipment.tracking import RecordTrackingEvent, UpdateShipmentStatus
from shipping.shipment.weights import UpdateDestinationWeights


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _create_shipment():
    return _process(
        CreateShipment(
            quote_id="quote-proj-001",
            customer_id="cust-proj-001",
            destinations=json.dumps(
                [
                    {"fba_warehouse": "BFI4", "cartons": 8, "chargeable_weight": 210.0},
                    {"fba_warehouse": "PDX9", "cartons": 2, "chargeable_weight": 40.0},
                ]
            ),
        )
    )


def _pay(shipment_id):
    _process(GenerateInvoice(shipment_id=shipment_id, amount=640.0))
    _process(PayInvoice(shipment_id=shipment_id))


def _provide_all_ids(shipment_id):
    shipment = current_domain.repository_for(Shipment).get(shipment_id)
    _process(
        ProvideAmazonIds(
            shipment_id=shipment_id,
            destinations=json.dumps(
                [
                    {
                        "destination_id": str(d.id),
                        "amazon_shipment_id": f"FBA-{d.fba_warehouse}",
                        "amazon_reference_id": f"{d.fba_warehouse}ABCD",
                    }
                    for d in shipment.destinations
                ]
            ),
        )
    )
    return shipment


class TestShipmentProgressView:
    def test_created_on_booking(self):
        shipment_id = _create_shipment()
        view = current_domain.repository_for(ShipmentProgressView).get(shipment_id)
        assert view.label == "Booking Confirmed"
        assert view.percent == 10
        assert view.badge == "secondary"
        assert str(view.customer_id) == "cust-proj-001"

    def test_follows_payment_and_ids(self):
        shipment_id = _create_shipment()
        _pay(shipment_id)
        view = current_domain.repository_for(ShipmentProgressView).get(shipment_id)
        assert view.label == "Missing Shipment IDs"
        assert view.missing_ids is True

        _provide_all_ids(shipment_id)
        view = current_domain.repository_for(ShipmentProgressView).get(shipment_id)
        assert view.label == "In Progress"
        assert view.percent == 80
        assert view.missing_ids is False

    def test_steps_stored_as_json(self):
        shipment_id = _create_shipment()
        view = current_domain.repository_for(ShipmentProgressView).get(shipment_id)
        steps = json.loads(view.steps_json)
        assert [s["completed"] for s in steps] == [True, False, False, False, False]


    def test_shipments_for_customer(self):
        shipment_id = _create_shipment()
        assert [str(v.shipment_id) for v in shipments_for("cust-proj-001")] == [shipment_id]
        assert shipments_for("someone-else") == []
        assert len(shipments_for()) == 1


class TestWarehouseProgressView:
    def test_one_row_per_leg(self):
        shipment_id = _create_shipment()
        rows = {row.fba_warehouse: row for row in warehouses_for(shipment_id)}
        assert set(rows) == {"BFI4", "PDX9"}
        assert rows["BFI4"].cartons == 8
        assert rows["BFI4"].delivery_status == DeliveryStatus.PENDING.value

    def test_ids_and_delivery_recorded(self):
        shipment_id = _create_shipment()
        _pay(shipment_id)
        shipment = _provide_all_ids(shipment_id)
        for status in ("Awaiting Pickup", "In Transit"):
            _process(UpdateShipmentStatus(shipment_id=shipment_id, status=status))
        leg = next(d for d in shipment.destinations if d.fba_warehouse == "PDX9")
        _process(RecordDestinationDelivery(shipment_id=shipment_id, destination_id=str(leg.id)))

        view = current_domain.repository_for(WarehouseProgressView).get(str(leg.id))
        assert view.amazon_shipment_id == "FBA-PDX9"
        assert view.amazon_reference_id == "PDX9ABCD"
        assert view.delivery_status == DeliveryStatus.DELIVERED.value
        assert view.label == "Delivered"
        assert view.percent == 100

    def test_weights_recorded(self):
        shipment_id = _create_shipment()
        shipment = current_domain.repository_for(Shipment).get(shipment_id)
        leg = next(d for d in shipment.destinations if d.fba_warehouse == "BFI4")
        _process(
            UpdateDestinationWeights(
                shipment_id=shipment_id,
                destinations=json.dumps([{"destination_id": str(leg.id), "cartons": 9, "chargeable_weight": 236.5}]),
            )
        )

        view = current_domain.repository_for(WarehouseProgressView).get(str(leg.id))
        assert view.cartons == 9
        assert view.chargeable_weight == 236.5
        assert view.label == "Booking Confirmed"


class TestActiveShipmentsView:
    def test_created_with_totals(self):
        shipment_id = _create_shipment()
        view = current_domain.repository_for(ActiveShipmentsView).get(shipment_id)
        assert view.first_destination == "BFI4"
        assert view.destination_count == 2
        assert view.total_cartons == 10.0
        assert view.total_chargeable_weight == 250.0
        assert view.last_update == "No updates yet"

    def test_last_update_from_tracking(self):
        shipment_id = _create_shipment()
        _process(RecordTrackingEvent(shipment_id=shipment_id, status="Note", description="Cargo received at CFS"))
        view = current_domain.repository_for(ActiveShipmentsView).get(shipment_id)
        assert view.last_update.endswith(" - Cargo received at CFS")

    def test_totals_follow_weight_updates(self):
        shipment_id = _create_shipment()
        shipment = current_domain.repository_for(Shipment).get(shipment_id)
        leg = next(d for d in shipment.destinations if d.fba_warehouse == "PDX9")
        _process(
            UpdateDestinationWeights(
                shipment_id=shipment_id,
                destinations=json.dumps([{"destination_id": str(leg.id), "chargeable_weight": 65.0}]),
            )
        )

        view = current_domain.repository_for(ActiveShipmentsView).get(shipment_id)
        assert view.total_cartons == 10.0
        assert view.total_chargeable_weight == 275.0

    def test_last_update_uses_reported_time(self):
        shipment_id = _create_shipment()
        _process(
            RecordTrackingEvent(
                shipment_id=shipment_id,
                status="Gate In",
                description="Container gated in",
                occurred_at=datetime(2026, 1, 5, 8, 0, tzinfo=UTC),
            )
        )
        view = current_domain.repository_for(ActiveShipmentsView).get(shipment_id)
        assert view.last_update == "2026-01-05 - Container gated in"

    def test_removed_when_delivered(self):
        shipment_id = _create_shipment()
        for status in ("Awaiting Pickup", "In Transit", "Delivered"):
            _process(UpdateShipmentStatus(shipment_id=shipment_id, status=status))
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(ActiveShipmentsView).get(shipment_id)

    def test_removed_when_cancelled(self):
        shipment_id = _create_shipment()
        _process(CancelShipment(shipment_id=shipment_id, reason="Withdrawn"))
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(ActiveShipmentsView).get(shipment_id)


class TestShipmentTrackingView:
    def test_status_location_and_log(self):
        shipment_id = _create_shipment()
        _process(UpdateShipmentStatus(shipment_id=shipment_id, status="Awaiting Pickup", location="Xiamen"))
        _process(UpdateShipmentStatus(shipment_id=shipment_id, status="In Transit"))

        view = current_domain.repository_for(ShipmentTrackingView).get(shipment_id)
        assert view.current_status == "In Transit"
        assert view.current_location == "Xiamen"
        assert len(json.loads(view.events_json)) == 2

    def test_delivered_at_set(self):
        shipment_id = _create_shipment()
        for status in ("Awaiting Pickup", "In Transit", "Delivered"):
            _process(UpdateShipmentStatus(shipment_id=shipment_id, status=status))
        view = current_domain.repository_for(ShipmentTrackingView).get(shipment_id)
        assert view.delivered_at is not None

    def test_cancelled(self):
        shipment_id = _create_shipment()
        _process(CancelShipment(shipment_id=shipment_id, reason="Withdrawn"))
        view = current_domain.repository_for(ShipmentTrackingView).get(shipment_id)
        assert view.current_status == "Cancelled"
