"""Pipeline auto-advance — the stage a lead moves to after an outcome.

Only the early stages move on their own. A salesperson moves a lead past
hot by hand; dead and closed leads never move automatically.

  cold       + any activity                          → contacted
  contacted  + meeting_set | proposal_requested      → hot
  contacted  + connected | interested | replied
               | callback_requested                  → warm
  warm       + meeting_set | proposal_requested      → hot
"""

from outreach.constants import Outcome, PipelineStage, parse_enum

WARM_OUTCOMES = (
    Outcome.CONNECTED, Outcome.INTERESTED, Outcome.REPLIED, Outcome.CALLBACK_REQUESTED,
)
HOT_OUTCOMES = (Outcome.MEETING_SET, Outcome.PROPOSAL_REQUESTED)


def next_stage(current_stage: str | None, outcome: str | None) -> PipelineStage | None:
    """Stage to advance to, or None to stay put. Never moves backwards."""
    stage = parse_enum(PipelineStage, current_stage)
    result = parse_enum(Outcome, outcome)

    if stage == PipelineStage.COLD:
        return PipelineStage.CONTACTED
    if stage == PipelineStage.CONTACTED:
        if result in HOT_OUTCOMES:
            return PipelineStage.HOT
        if result in WARM_OUTCOMES:
            return PipelineStage.WARM
        return None
    if stage == PipelineStage.WARM and result in HOT_OUTCOMES:
        return PipelineStage.HOT
    return None
