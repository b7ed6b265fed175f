"""Bundled progress evaluation for one shipment."""

import json
from dataclasses import dataclass

from shipping.progress.badges import badge_for
from shipping.progress.derivation import DerivedStatus, derive_all
from shipping.progress.records import ShipmentRecord
from shipping.progress.steps import ProgressStep, project_steps


@dataclass(frozen=True)
class ProgressReport:
    shipment_id: str
    raw_status: str
    status: DerivedStatus
    steps: tuple[ProgressStep, ...]
    destinations: dict[str, DerivedStatus]

    @property
    def badge(self) -> str:
        return badge_for(self.status.label)

    def steps_json(self) -> str:
        return json.dumps([step.to_dict() for step in self.steps])

    def destinations_json(self) -> str:
        return json.dumps(
            [
                {
                    "destination_id": destination_id,
                    "label": derived.label,
                    "percent": derived.percent,
                    "missing_id": derived.missing_ids,
                }
                for destination_id, derived in self.destinations.items()
            ]
        )


def evaluate(shipment: ShipmentRecord) -> ProgressReport:
    derived, per_destination = derive_all(shipment)
    return ProgressReport(
        shipment_id=shipment.id,
        raw_status=shipment.raw_status,
        status=derived,
        steps=project_steps(shipment, derived),
        destinations=per_destination,
    )
