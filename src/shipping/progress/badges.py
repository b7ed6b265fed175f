"""Badge variants for status labels, as rendered by the portal."""

from shipping.progress.records import DisplayStatus, RawStatus

_BADGE_VARIANTS = {
    DisplayStatus.MISSING_SHIPMENT_IDS.value: "error",
    DisplayStatus.IN_PROGRESS.value: "info",
    RawStatus.IN_TRANSIT.value: "info",
    RawStatus.OUT_FOR_DELIVERY.value: "info",
    RawStatus.CUSTOMS.value: "warning",
    RawStatus.DELIVERED.value: "success",
    RawStatus.AWAITING_PICKUP.value: "secondary",
    RawStatus.BOOKING_CONFIRMED.value: "secondary",
    RawStatus.CANCELLED.value: "danger",
}


def badge_for(label: str) -> str:
    return _BADGE_VARIANTS.get(label, "default")
