"""Shared BDD fixtures and step definitions for the Shipping domain."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from shipping.shipment.events import (
    AmazonIdsProvided,
    DestinationDelivered,
    InvoiceGenerated,
    InvoicePaid,
    ShipmentCancelled,
    ShipmentCreated,
    ShipmentProgressChanged,
    ShipmentStatusUpdated,
    TrackingEventRecorded,
)
from shipping.shipment.shipment import Shipment

_SHIPMENT_EVENT_CLASSES = {
    "ShipmentCreated": ShipmentCreated,
    "ShipmentStatusUpdated": ShipmentStatusUpdated,
    "TrackingEventRecorded": TrackingEventRecorded,
    "InvoiceGenerated": InvoiceGenerated,
    "InvoicePaid": InvoicePaid,
    "AmazonIdsProvided": AmazonIdsProvided,
    "DestinationDelivered": DestinationDelivered,
    "ShipmentCancelled": ShipmentCancelled,
    "ShipmentProgressChanged": ShipmentProgressChanged,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a shipment booked for warehouses "{warehouses}"'), target_fixture="shipment")
def booked_shipment(warehouses):
    shipment = Shipment.create(
        quote_id="quote-bdd",
        customer_id="cust-bdd",
        destinations_data=[{"fba_warehouse": code, "cartons": 4} for code in warehouses.split(",")],
    )
    shipment._events.clear()
    return shipment


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the progress label is "{label}"'))
def progress_label_is(shipment, label):
    assert shipment.progress().status.label == label


@then(parsers.cfparse("the progress is {percent:d} percent"))
def progress_percent_is(shipment, percent):
    assert shipment.progress().status.percent == percent


@then(parsers.cfparse('the badge is "{variant}"'))
def badge_is(shipment, variant):
    assert shipment.progress().badge == variant


@then("the shipment is flagged as missing IDs")
def flagged_missing_ids(shipment):
    assert shipment.progress().status.missing_ids is True


@then(parsers.cfparse('the "{step_id}" step is completed'))
def step_completed(shipment, step_id):
    steps = {step.id: step.completed for step in shipment.progress().steps}
    assert steps[step_id] is True


@then(parsers.cfparse('only the "{step_id}" step is completed'))
def only_step_completed(shipment, step_id):
    completed = [step.id for step in shipment.progress().steps if step.completed]
    assert completed == [step_id]


@then(parsers.cfparse('the warehouse "{code}" shows "{label}"'))
def warehouse_shows(shipment, code, label):
    destination = next(d for d in shipment.destinations if d.fba_warehouse == code)
    assert shipment.progress().destinations[str(destination.id)].label == label


@then("the shipment action fails with a validation error")
def shipment_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} event is raised"))
def shipment_event_raised(shipment, event_type):
    event_cls = _SHIPMENT_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in shipment._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in shipment._events]}"
