"""Pydantic API schemas for the Shipping domain.

These are the external API contracts, separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class DestinationRequest(BaseModel):
    fba_warehouse: str
    cartons: int = Field(default=0, ge=0)
    chargeable_weight: float = Field(default=0.0, ge=0)


class CreateShipmentRequest(BaseModel):
    quote_id: str
    customer_id: str
    service_mode: str | None = None
    destinations: list[DestinationRequest]


class UpdateStatusRequest(BaseModel):
    status: str
    location: str | None = None
    description: str | None = None


class TrackingEventRequest(BaseModel):
    status: str
    location: str | None = None
    description: str | None = None
    occurred_at: datetime | None = None


class GenerateInvoiceRequest(BaseModel):
    amount: float = Field(ge=0)
    invoice_number: str | None = None


class AmazonIdsEntry(BaseModel):
    destination_id: str
    amazon_shipment_id: str
    amazon_reference_id: str


class ProvideAmazonIdsRequest(BaseModel):
    destinations: list[AmazonIdsEntry]


class DestinationWeightsEntry(BaseModel):
    destination_id: str
    cartons: int | None = Field(default=None, ge=0)
    chargeable_weight: float | None = Field(default=None, ge=0)


class UpdateWeightsRequest(BaseModel):
    destinations: list[DestinationWeightsEntry]


class CancelShipmentRequest(BaseModel):
    reason: str


class DeriveProgressRequest(BaseModel):
    """A shipment row as held by the caller, in any supported key style."""

    shipment: dict[str, Any]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class ShipmentIdResponse(BaseModel):
    shipment_id: str


class InvoiceResponse(BaseModel):
    invoice_number: str


class StatusResponse(BaseModel):
    status: str


class ProgressStepResponse(BaseModel):
    id: str
    label: str
    completed: bool


class DerivedStatusResponse(BaseModel):
    label: str
    percent: int
    missing_ids: bool


class DestinationProgressResponse(BaseModel):
    destination_id: str
    label: str
    percent: int
    missing_ids: bool


class DeriveProgressResponse(BaseModel):
    shipment_id: str
    raw_status: str
    status: DerivedStatusResponse
    badge: str
    steps: list[ProgressStepResponse]
    destinations: list[DestinationProgressResponse]


class ShipmentProgressResponse(BaseModel):
    shipment_id: str
    customer_id: str | None = None
    raw_status: str
    label: str
    percent: int
    missing_ids: bool
    badge: str
    steps: list[ProgressStepResponse]


class ShipmentListResponse(BaseModel):
    shipments: list[ShipmentProgressResponse]


class WarehouseProgressResponse(BaseModel):
    destination_id: str
    fba_warehouse: str
    amazon_shipment_id: str | None = None
    amazon_reference_id: str | None = None
    cartons: int
    chargeable_weight: float
    delivery_status: str
    label: str | None = None
    percent: int
    missing_id: bool


class WarehouseProgressListResponse(BaseModel):
    shipment_id: str
    warehouses: list[WarehouseProgressResponse]


class ActiveShipmentResponse(BaseModel):
    shipment_id: str
    customer_id: str
    display_status: str
    badge: str | None = None
    progress: int
    missing_ids: bool
    first_destination: str | None = None
    destination_count: int
    total_cartons: float
    total_chargeable_weight: float
    last_update: str | None = None


class ActiveShipmentListResponse(BaseModel):
    shipments: list[ActiveShipmentResponse]


class TrackingEventResponse(BaseModel):
    status: str
    location: str | None = None
    description: str | None = None
    occurred_at: str | None = None


class ShipmentTrackingResponse(BaseModel):
    shipment_id: str
    current_status: str
    current_location: str | None = None
    events: list[TrackingEventResponse]
