"""FastAPI routes for the Shipping domain."""

import json

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from shipping.api.schemas import (
    ActiveShipmentListResponse,
    ActiveShipmentResponse,
    CancelShipmentRequest,
    CreateShipmentRequest,
    DeriveProgressRequest,
    DeriveProgressResponse,
    DerivedStatusResponse,
    DestinationProgressResponse,
    GenerateInvoiceRequest,
    InvoiceResponse,
    ProgressStepResponse,
    ProvideAmazonIdsRequest,
    ShipmentIdResponse,
    ShipmentListResponse,
    ShipmentProgressResponse,
    ShipmentTrackingResponse,
    StatusResponse,
    TrackingEventRequest,
    TrackingEventResponse,
    UpdateStatusRequest,
    UpdateWeightsRequest,
    WarehouseProgressListResponse,
    WarehouseProgressResponse,
)
from shipping.progress import evaluate, normalize_shipment
from shipping.projections.active_shipments import ActiveShipmentsView
from shipping.projections.shipment_progress import ShipmentProgressView, shipments_for
from shipping.projections.shipment_tracking import ShipmentTrackingView
from shipping.projections.warehouse_progress import warehouses_for
from shipping.shipment.amazon_ids import ProvideAmazonIds
from shipping.shipment.cancellation import CancelShipment
from shipping.shipment.creation import CreateShipment
from shipping.shipment.delivery import RecordDestinationDelivery
from shipping.shipment.invoicing import GenerateInvoice, PayInvoice
from shipping.shipment.shipment import Shipment
from shipping.shipment.tracking import RecordTrackingEvent, UpdateShipmentStatus
from shipping.shipment.weights import UpdateDestinationWeights


def _progress_response(view: ShipmentProgressView) -> ShipmentProgressResponse:
    steps = json.loads(view.steps_json) if view.steps_json else []
    return ShipmentProgressResponse(
        shipment_id=str(view.shipment_id),
        customer_id=str(view.customer_id),
        raw_status=view.raw_status,
        label=view.label,
        percent=view.percent or 0,
        missing_ids=bool(view.missing_ids),
        badge=view.badge or "",
        steps=[ProgressStepResponse(**step) for step in steps],
    )


# ---------------------------------------------------------------------------
# Shipment Router
# ---------------------------------------------------------------------------
shipment_router = APIRouter(prefix="/shipments", tags=["shipments"])


@shipment_router.post("", status_code=201, response_model=ShipmentIdResponse)
async def create_shipment(body: CreateShipmentRequest) -> ShipmentIdResponse:
    """Book a shipment for an accepted quote."""
    command = CreateShipment(
        quote_id=body.quote_id,
        customer_id=body.customer_id,
        service_mode=body.service_mode,
        destinations=json.dumps([d.model_dump() for d in body.destinations]),
    )
    result = current_domain.process(command, asynchronous=False)
    return ShipmentIdResponse(shipment_id=result)


@shipment_router.get("", response_model=ShipmentListResponse)
async def list_shipments(customer_id: str | None = Query(default=None)) -> ShipmentListResponse:
    """A customer's shipments with their progress, or every shipment for staff."""
    return ShipmentListResponse(shipments=[_progress_response(view) for view in shipments_for(customer_id)])


@shipment_router.get("/active", response_model=ActiveShipmentListResponse)
async def list_active_shipments() -> ActiveShipmentListResponse:
    """Staff work list: every shipment not yet delivered or cancelled."""
    rows = current_domain.repository_for(ActiveShipmentsView)._dao.query.order_by("created_at").all().items
    return ActiveShipmentListResponse(
        shipments=[
            ActiveShipmentResponse(
                shipment_id=str(row.shipment_id),
                customer_id=str(row.customer_id),
                display_status=row.display_status,
                badge=row.badge,
                progress=row.progress or 0,
                missing_ids=bool(row.missing_ids),
                first_destination=row.first_destination,
                destination_count=row.destination_count or 0,
                total_cartons=row.total_cartons or 0.0,
                total_chargeable_weight=row.total_chargeable_weight or 0.0,
                last_update=row.last_update,
            )
            for row in rows
        ]
    )


@shipment_router.put("/{shipment_id}/status", response_model=StatusResponse)
async def update_status(shipment_id: str, body: UpdateStatusRequest) -> StatusResponse:
    """Move the shipment to a new carrier status."""
    command = UpdateShipmentStatus(
        shipment_id=shipment_id,
        status=body.status,
        location=body.location,
        description=body.description,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="status_updated")


@shipment_router.post("/{shipment_id}/tracking", response_model=StatusResponse)
async def record_tracking_event(shipment_id: str, body: TrackingEventRequest) -> StatusResponse:
    """Log a tracking event without changing the shipment status."""
    command = RecordTrackingEvent(
        shipment_id=shipment_id,
        status=body.status,
        location=body.location,
        description=body.description,
        occurred_at=body.occurred_at,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="tracking_recorded")


@shipment_router.post("/{shipment_id}/invoice", status_code=201, response_model=InvoiceResponse)
async def generate_invoice(shipment_id: str, body: GenerateInvoiceRequest) -> InvoiceResponse:
    """Issue the shipment invoice."""
    command = GenerateInvoice(
        shipment_id=shipment_id,
        amount=body.amount,
        invoice_number=body.invoice_number,
    )
    result = current_domain.process(command, asynchronous=False)
    return InvoiceResponse(invoice_number=result)


@shipment_router.put("/{shipment_id}/invoice/pay", response_model=StatusResponse)
async def pay_invoice(shipment_id: str) -> StatusResponse:
    """Record the customer's payment of the invoice."""
    current_domain.process(PayInvoice(shipment_id=shipment_id), asynchronous=False)
    return StatusResponse(status="invoice_paid")


@shipment_router.put("/{shipment_id}/amazon-ids", response_model=StatusResponse)
async def provide_amazon_ids(shipment_id: str, body: ProvideAmazonIdsRequest) -> StatusResponse:
    """Save Amazon Shipment and Reference IDs for one or more warehouse legs."""
    command = ProvideAmazonIds(
        shipment_id=shipment_id,
        destinations=json.dumps([entry.model_dump() for entry in body.destinations]),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="amazon_ids_saved")


@shipment_router.patch("/{shipment_id}/weights", response_model=StatusResponse)
async def update_weights(shipment_id: str, body: UpdateWeightsRequest) -> StatusResponse:
    """Correct cartons and chargeable weight of warehouse legs."""
    command = UpdateDestinationWeights(
        shipment_id=shipment_id,
        destinations=json.dumps([entry.model_dump() for entry in body.destinations]),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="weights_updated")


@shipment_router.put("/{shipment_id}/destinations/{destination_id}/deliver", response_model=StatusResponse)
async def record_destination_delivery(shipment_id: str, destination_id: str) -> StatusResponse:
    """Mark one warehouse leg delivered."""
    command = RecordDestinationDelivery(shipment_id=shipment_id, destination_id=destination_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="destination_delivered")


@shipment_router.put("/{shipment_id}/cancel", response_model=StatusResponse)
async def cancel_shipment(shipment_id: str, body: CancelShipmentRequest) -> StatusResponse:
    """Cancel a shipment that is not yet out for delivery."""
    command = CancelShipment(shipment_id=shipment_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="cancelled")


@shipment_router.get("/{shipment_id}/progress", response_model=ShipmentProgressResponse)
async def get_progress(shipment_id: str) -> ShipmentProgressResponse:
    """Customer-facing badge, progress bar and milestone steps."""
    return _progress_response(current_domain.repository_for(ShipmentProgressView).get(shipment_id))


@shipment_router.get("/{shipment_id}/warehouses", response_model=WarehouseProgressListResponse)
async def get_warehouses(shipment_id: str) -> WarehouseProgressListResponse:
    """One progress card per FBA warehouse leg."""
    # Raises ObjectNotFoundError for unknown shipments
    current_domain.repository_for(Shipment).get(shipment_id)
    return WarehouseProgressListResponse(
        shipment_id=shipment_id,
        warehouses=[
            WarehouseProgressResponse(
                destination_id=str(view.destination_id),
                fba_warehouse=view.fba_warehouse,
                amazon_shipment_id=view.amazon_shipment_id,
                amazon_reference_id=view.amazon_reference_id,
                cartons=view.cartons or 0,
                chargeable_weight=view.chargeable_weight or 0.0,
                delivery_status=view.delivery_status,
                label=view.label,
                percent=view.percent or 0,
                missing_id=bool(view.missing_id),
            )
            for view in warehouses_for(shipment_id)
        ],
    )


@shipment_router.get("/{shipment_id}/tracking", response_model=ShipmentTrackingResponse)
async def get_tracking(shipment_id: str) -> ShipmentTrackingResponse:
    """Current status, location and the tracking log."""
    view = current_domain.repository_for(ShipmentTrackingView).get(shipment_id)
    events = json.loads(view.events_json) if view.events_json else []
    return ShipmentTrackingResponse(
        shipment_id=str(view.shipment_id),
        current_status=view.current_status,
        current_location=view.current_location,
        events=[TrackingEventResponse(**event) for event in events],
    )


# ---------------------------------------------------------------------------
# Progress Router
# ---------------------------------------------------------------------------
progress_router = APIRouter(prefix="/progress", tags=["progress"])


@progress_router.post("/derive", response_model=DeriveProgressResponse)
async def derive_progress(body: DeriveProgressRequest) -> DeriveProgressResponse:
    """Evaluate the progress rules for a shipment row without storing anything."""
    report = evaluate(normalize_shipment(body.shipment))
    return DeriveProgressResponse(
        shipment_id=report.shipment_id,
        raw_status=report.raw_status,
        status=DerivedStatusResponse(
            label=report.status.label,
            percent=report.status.percent,
            missing_ids=report.status.missing_ids,
        ),
        badge=report.badge,
        steps=[ProgressStepResponse(**step.to_dict()) for step in report.steps],
        destinations=[
            DestinationProgressResponse(
                destination_id=destination_id,
                label=derived.label,
                percent=derived.percent,
                missing_ids=derived.missing_ids,
            )
            for destination_id, derived in report.destinations.items()
        ],
    )
