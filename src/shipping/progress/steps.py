"""Milestone timeline for the shipment detail page."""

from dataclasses import dataclass
from enum import Enum

from shipping.progress.derivation import DerivedStatus
from shipping.progress.records import DisplayStatus, RawStatus, ShipmentRecord


class StepId(Enum):
    WAITING = "waiting"
    PAYMENT = "payment"
    SHIPMENT_IDS = "shipment-ids"
    IN_PROGRESS = "in-progress"
    DELIVERED = "delivered"


STEP_LABELS = {
    StepId.WAITING: "Waiting for Pickup",
    StepId.PAYMENT: "Invoice Payment",
    StepId.SHIPMENT_IDS: "Shipment IDs",
    StepId.IN_PROGRESS: "In Progress",
    StepId.DELIVERED: "Delivered",
}

_MOVING_STATUSES = {RawStatus.IN_TRANSIT.value, RawStatus.CUSTOMS.value}


@dataclass(frozen=True)
class ProgressStep:
    id: str
    label: str
    completed: bool

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label, "completed": self.completed}


def ids_complete(shipment: ShipmentRecord) -> bool:
    """Paid, and every (at least one) destination carries an Amazon Shipment ID."""
    destinations = tuple(shipment.destinations or ())
    return shipment.is_paid and bool(destinations) and all(d.has_shipment_id for d in destinations)


def project_steps(shipment: ShipmentRecord, derived: DerivedStatus) -> tuple[ProgressStep, ...]:
    """Expand a derived status into the five fixed milestone steps.

    Each step's completion is computed on its own; a later step may be
    complete while an earlier one is not (e.g. a raw "In Transit" shipment
    whose invoice is still unpaid).
    """
    raw = shipment.raw_status or ""
    ids_done = ids_complete(shipment)

    completed = {
        StepId.WAITING: True,
        StepId.PAYMENT: shipment.is_paid,
        StepId.SHIPMENT_IDS: ids_done,
        StepId.IN_PROGRESS: raw in _MOVING_STATUSES
        or (derived.label == DisplayStatus.IN_PROGRESS.value and ids_done),
        StepId.DELIVERED: raw == RawStatus.DELIVERED.value,
    }
    return tuple(ProgressStep(id=step.value, label=STEP_LABELS[step], completed=completed[step]) for step in StepId)
