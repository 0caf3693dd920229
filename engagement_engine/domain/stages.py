from __future__ import annotations

from enum import Enum
from typing import Final


class FunnelStageName(str, Enum):
    INVITED = "invited"
    OPENED = "opened"
    PAGE_VIEWED = "page_viewed"
    FORM_STARTED = "form_started"
    RESPONDED = "responded"


FUNNEL_STAGE_LABELS: Final[dict[FunnelStageName, str]] = {
    FunnelStageName.INVITED: "Invited",
    FunnelStageName.OPENED: "Opened Invite",
    FunnelStageName.PAGE_VIEWED: "Viewed Page",
    FunnelStageName.FORM_STARTED: "Started RSVP",
    FunnelStageName.RESPONDED: "Responded",
}

# Order is display order and defines which stages are adjacent for dropoff.
STANDARD_FUNNEL: Final[tuple[FunnelStageName, ...]] = (
    FunnelStageName.INVITED,
    FunnelStageName.OPENED,
    FunnelStageName.RESPONDED,
)

EXTENDED_FUNNEL: Final[tuple[FunnelStageName, ...]] = (
    FunnelStageName.INVITED,
    FunnelStageName.OPENED,
    FunnelStageName.PAGE_VIEWED,
    FunnelStageName.FORM_STARTED,
    FunnelStageName.RESPONDED,
)

_missing_labels = set(FunnelStageName) - set(FUNNEL_STAGE_LABELS)
if _missing_labels:
    raise RuntimeError(f"Funnel stages without a label: {sorted(s.value for s in _missing_labels)}")


def stage_label(name: FunnelStageName) -> str:
    return FUNNEL_STAGE_LABELS[FunnelStageName(name)]
