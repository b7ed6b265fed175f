"""Tests for Shipment business rule invariants."""

import pytest
from protean.exceptions import ValidationError
from shipping.shipment.shipment import Shipment


def _make_shipment(count=2):
    return Shipment.create(
        quote_id="quote-001",
        customer_id="cust-001",
        destinations_data=[{"fba_warehouse": f"SBD{i}"} for i in range(1, count + 1)],
    )


def _paid_shipment(count=2):
    shipment = _make_shipment(count)
    shipment.generate_invoice(900.0)
    shipment.pay_invoice()
    return shipment


def _in_transit_shipment(count=2):
    shipment = _make_shipment(count)
    shipment.update_status("Awaiting Pickup")
    shipment.update_status("In Transit")
    return shipment


def _entry(destination, shipment_id="FBA15XYZ", reference_id="AB12CD34"):
    return {
        "destination_id": str(destination.id),
        "amazon_shipment_id": shipment_id,
        "amazon_reference_id": reference_id,
    }


class TestInvoiceInvariants:
    def test_only_one_invoice(self):
        shipment = _make_shipment()
        shipment.generate_invoice(100.0)
        with pytest.raises(ValidationError) as exc:
            shipment.generate_invoice(200.0)
        assert "already been generated" in str(exc.value)

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            _make_shipment().generate_invoice(-1.0)

    def test_cannot_pay_without_invoice(self):
        with pytest.raises(ValidationError) as exc:
            _make_shipment().pay_invoice()
        assert "No invoice" in str(exc.value)

    def test_cannot_pay_twice(self):
        shipment = _paid_shipment()
        with pytest.raises(ValidationError) as exc:
            shipment.pay_invoice()
        assert "already been paid" in str(exc.value)

    def test_cannot_invoice_cancelled_shipment(self):
        shipment = _make_shipment()
        shipment.cancel("Withdrawn")
        with pytest.raises(ValidationError):
            shipment.generate_invoice(100.0)


class TestAmazonIdInvariants:
    def test_ids_require_paid_invoice(self):
        shipment = _make_shipment()
        shipment.generate_invoice(100.0)
        with pytest.raises(ValidationError) as exc:
            shipment.provide_amazon_ids([_entry(shipment.destinations[0])])
        assert "after the invoice is paid" in str(exc.value)

    def test_at_least_one_entry(self):
        with pytest.raises(ValidationError):
            _paid_shipment().provide_amazon_ids([])

    @pytest.mark.parametrize("reference_id", ["ABC", "AB12CD345", "AB-2CD34", "AB12 D34"])
    def test_reference_id_must_be_eight_alphanumerics(self, reference_id):
        shipment = _paid_shipment()
        with pytest.raises(ValidationError) as exc:
            shipment.provide_amazon_ids([_entry(shipment.destinations[0], reference_id=reference_id)])
        assert "exactly 8 alphanumeric" in str(exc.value)

    def test_lowercase_reference_id_accepted(self):
        shipment = _paid_shipment()
        shipment.provide_amazon_ids([_entry(shipment.destinations[0], reference_id="ab12cd34")])
        assert shipment.destinations[0].amazon_reference_id == "ab12cd34"

    def test_both_ids_required(self):
        shipment = _paid_shipment()
        with pytest.raises(ValidationError) as exc:
            shipment.provide_amazon_ids([_entry(shipment.destinations[0], shipment_id="  ")])
        assert "Both Amazon Shipment ID and Amazon Reference ID are required for SBD1" in str(exc.value)

    def test_unknown_destination_rejected(self):
        shipment = _paid_shipment()
        with pytest.raises(ValidationError) as exc:
            shipment.provide_amazon_ids(
                [{"destination_id": "nope", "amazon_shipment_id": "FBA1", "amazon_reference_id": "AB12CD34"}]
            )
        assert "not found" in str(exc.value)

    def test_invalid_entry_leaves_every_leg_untouched(self):
        shipment = _paid_shipment()
        first, second = shipment.destinations
        with pytest.raises(ValidationError):
            shipment.provide_amazon_ids([_entry(first), _entry(second, reference_id="bad")])
        assert first.amazon_shipment_id is None
        assert second.amazon_shipment_id is None


class TestDeliveryInvariants:
    def test_cannot_deliver_twice(self):
        shipment = _in_transit_shipment()
        destination_id = str(shipment.destinations[0].id)
        shipment.record_destination_delivery(destination_id)
        with pytest.raises(ValidationError) as exc:
            shipment.record_destination_delivery(destination_id)
        assert "already been delivered" in str(exc.value)

    def test_unknown_destination(self):
        with pytest.raises(ValidationError) as exc:
            _in_transit_shipment().record_destination_delivery("missing")
        assert "not found" in str(exc.value)

    @pytest.mark.parametrize("statuses", [[], ["Awaiting Pickup"]])
    def test_cannot_deliver_before_freight_moves(self, statuses):
        shipment = _make_shipment()
        for status in statuses:
            shipment.update_status(status)
        with pytest.raises(ValidationError) as exc:
            shipment.record_destination_delivery(str(shipment.destinations[0].id))
        assert "Cannot record a warehouse delivery" in str(exc.value)
        assert shipment.destinations[0].delivery_status == "pending"

    @pytest.mark.parametrize("status", ["Customs", "Out for Delivery"])
    def test_can_deliver_while_moving(self, status):
        shipment = _in_transit_shipment()
        shipment.update_status(status)
        shipment.record_destination_delivery(str(shipment.destinations[0].id))
        assert shipment.destinations[0].delivery_status == "delivered"

    def test_cannot_deliver_on_cancelled_shipment(self):
        shipment = _in_transit_shipment()
        shipment.cancel("Withdrawn")
        with pytest.raises(ValidationError) as exc:
            shipment.record_destination_delivery(str(shipment.destinations[0].id))
        assert "cancelled shipment" in str(exc.value)

    def test_no_tracking_on_cancelled_shipment(self):
        shipment = _make_shipment()
        shipment.cancel("Withdrawn")
        with pytest.raises(ValidationError):
            shipment.record_tracking_event("Note", description="Late note")


class TestCancellationInvariants:
    def test_cannot_cancel_once_every_leg_is_delivered(self):
        shipment = _in_transit_shipment()
        for destination in shipment.destinations:
            shipment.record_destination_delivery(str(destination.id))
        assert shipment.status == "In Transit"

        with pytest.raises(ValidationError) as exc:
            shipment.cancel("Too late")
        assert "all been delivered" in str(exc.value)
        assert shipment.progress().status.label == "Delivered"

    def test_can_cancel_with_legs_still_pending(self):
        shipment = _in_transit_shipment()
        shipment.record_destination_delivery(str(shipment.destinations[0].id))
        shipment.cancel("Remaining leg refused")
        assert shipment.status == "Cancelled"

    def test_cannot_cancel_out_for_delivery(self):
        shipment = _in_transit_shipment()
        shipment.update_status("Out for Delivery")
        with pytest.raises(ValidationError):
            shipment.cancel("Too late")


class TestWeightInvariants:
    def test_at_least_one_entry(self):
        with pytest.raises(ValidationError):
            _make_shipment().update_destination_weights([])

    def test_unknown_destination_rejected(self):
        with pytest.raises(ValidationError):
            _make_shipment().update_destination_weights([{"destination_id": "missing", "cartons": 3}])

    @pytest.mark.parametrize("values", [{"cartons": -1}, {"chargeable_weight": -0.5}])
    def test_negative_values_rejected(self, values):
        shipment = _make_shipment()
        with pytest.raises(ValidationError):
            shipment.update_destination_weights([{"destination_id": str(shipment.destinations[0].id), **values}])

    def test_entry_needs_a_value(self):
        shipment = _make_shipment()
        with pytest.raises(ValidationError):
            shipment.update_destination_weights([{"destination_id": str(shipment.destinations[0].id)}])

    def test_invalid_entry_leaves_every_leg_untouched(self):
        shipment = _make_shipment()
        first, second = shipment.destinations
        with pytest.raises(ValidationError):
            shipment.update_destination_weights(
                [
                    {"destination_id": str(first.id), "cartons": 12},
                    {"destination_id": str(second.id), "chargeable_weight": -1},
                ]
            )
        assert first.cartons == 0

    def test_no_weights_on_cancelled_shipment(self):
        shipment = _make_shipment()
        shipment.cancel("Withdrawn")
        with pytest.raises(ValidationError):
            shipment.update_destination_weights([{"destination_id": str(shipment.destinations[0].id), "cartons": 2}])
