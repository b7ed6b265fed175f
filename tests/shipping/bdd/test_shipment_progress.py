"""BDD tests for shipment progress across the lifecycle."""

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, when

scenarios("features/shipment_progress.feature")


def _destination(shipment, code):
    return next(d for d in shipment.destinations if d.fba_warehouse == code)


@when(parsers.cfparse('staff move the shipment to "{status}"'), target_fixture="shipment")
def move_shipment(shipment, status):
    shipment.update_status(status)
    return shipment


@when(parsers.cfparse("staff issue an invoice for {amount:f}"), target_fixture="shipment")
def issue_invoice(shipment, amount):
    shipment.generate_invoice(amount)
    return shipment


@when("the customer pays the invoice", target_fixture="shipment")
def pay_invoice(shipment):
    shipment.pay_invoice()
    return shipment


@when(parsers.cfparse('the customer provides Amazon IDs for "{warehouses}"'), target_fixture="shipment")
def provide_ids(shipment, warehouses):
    entries = []
    for code in warehouses.split(","):
        entries.append(
            {
                "destination_id": str(_destination(shipment, code).id),
                "amazon_shipment_id": f"FBA15{code}",
                "amazon_reference_id": f"{code}REF1",
            }
        )
    shipment.provide_amazon_ids(entries)
    return shipment


@when(parsers.cfparse('the customer provides reference ID "{reference_id}" for "{code}"'))
def provide_bad_reference(shipment, reference_id, code, error):
    try:
        shipment.provide_amazon_ids(
            [
                {
                    "destination_id": str(_destination(shipment, code).id),
                    "amazon_shipment_id": f"FBA15{code}",
                    "amazon_reference_id": reference_id,
                }
            ]
        )
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the warehouse "{code}" is delivered'), target_fixture="shipment")
def deliver_leg(shipment, code):
    shipment.record_destination_delivery(str(_destination(shipment, code).id))
    return shipment


@when(parsers.cfparse('staff cancel the shipment because "{reason}"'), target_fixture="shipment")
def cancel_shipment(shipment, reason):
    shipment.cancel(reason)
    return shipment


@when(parsers.cfparse('staff try to deliver the warehouse "{code}"'))
def try_deliver_leg(shipment, code, error):
    try:
        shipment.record_destination_delivery(str(_destination(shipment, code).id))
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('staff try to cancel the shipment because "{reason}"'))
def try_cancel_shipment(shipment, reason, error):
    try:
        shipment.cancel(reason)
    except ValidationError as exc:
        error["exc"] = exc
