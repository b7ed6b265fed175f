"""Pure shipment progress rules: derivation, milestone steps and normalization.

Nothing in this package performs I/O or depends on the Protean domain; list
and detail views, the Shipment aggregate and the HTTP layer all consume these
functions instead of re-implementing the rules.
"""

from shipping.progress.badges import badge_for
from shipping.progress.derivation import (
    DerivedStatus,
    derive_all,
    derive_destination_status,
    derive_status,
)
from shipping.progress.normalization import canonical_status, normalize_shipment
from shipping.progress.records import (
    DestinationRecord,
    DisplayStatus,
    InvoiceSummary,
    PaymentState,
    RawStatus,
    ShipmentRecord,
    TrackingEventRecord,
)
from shipping.progress.report import ProgressReport, evaluate
from shipping.progress.steps import ProgressStep, StepId, project_steps

__all__ = [
    "DerivedStatus",
    "DestinationRecord",
    "DisplayStatus",
    "InvoiceSummary",
    "PaymentState",
    "ProgressReport",
    "ProgressStep",
    "RawStatus",
    "ShipmentRecord",
    "StepId",
    "TrackingEventRecord",
    "badge_for",
    "canonical_status",
    "derive_all",
    "derive_destination_status",
    "derive_status",
    "evaluate",
    "normalize_shipment",
    "project_steps",
]
