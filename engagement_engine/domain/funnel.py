from __future__ import annotations

from typing import Sequence

from engagement_engine.domain.rates import percentage, round_half_up
from engagement_engine.domain.stages import (
    EXTENDED_FUNNEL,
    STANDARD_FUNNEL,
    FunnelStageName,
    stage_label,
)
from engagement_engine.models.analytics import FunnelData, FunnelDropoff, FunnelStage


def calculate_dropoff(
    from_count: int,
    to_count: int,
    from_name: FunnelStageName,
    to_name: FunnelStageName,
) -> FunnelDropoff:
    # A later stage outgrowing an earlier one is clamped to zero loss.
    lost = max(0, from_count - to_count)
    rate = round_half_up(100 * lost, from_count) if from_count > 0 else 0
    return FunnelDropoff(from_stage=from_name, to_stage=to_name, lost=lost, rate=rate)


def build_funnel(stage_counts: Sequence[tuple[FunnelStageName, int]]) -> FunnelData:
    """Build a funnel from ordered ``(stage, count)`` pairs.

    Stage percentages are relative to the first stage, which is 100 by
    definition. Dropoffs are pairwise between adjacent stages. An empty first
    stage means no data: every later stage reports 0% and no dropoff loses
    anything.
    """
    if len(stage_counts) < 2:
        raise ValueError("A funnel needs at least two stages")

    _, first_count = stage_counts[0]

    stages: list[FunnelStage] = []
    for index, (name, count) in enumerate(stage_counts):
        stages.append(
            FunnelStage(
                name=name,
                label=stage_label(name),
                count=count,
                percentage=100 if index == 0 else percentage(count, first_count),
            )
        )

    dropoffs: list[FunnelDropoff] = []
    for (from_name, from_count), (to_name, to_count) in zip(stage_counts, stage_counts[1:]):
        if first_count == 0:
            from_count, to_count = 0, 0
        dropoffs.append(calculate_dropoff(from_count, to_count, from_name, to_name))

    return FunnelData(
        stages=tuple(stages),
        dropoffs=tuple(dropoffs),
        total_invited=first_count,
        total_responded=stage_counts[-1][1],
        overall_conversion_rate=stages[-1].percentage,
    )


def build_funnel_data(total_invited: int, total_opened: int, total_responded: int) -> FunnelData:
    """Invited -> opened -> responded."""
    counts = (total_invited, total_opened, total_responded)
    return build_funnel(list(zip(STANDARD_FUNNEL, counts)))


def build_extended_funnel_data(
    total_invited: int,
    total_opened: int,
    total_page_viewed: int,
    total_form_started: int,
    total_responded: int,
) -> FunnelData:
    """Invited -> opened -> page viewed -> form started -> responded."""
    counts = (total_invited, total_opened, total_page_viewed, total_form_started, total_responded)
    return build_funnel(list(zip(EXTENDED_FUNNEL, counts)))
