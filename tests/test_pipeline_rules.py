"""
test_pipeline_rules.py — Tests for services/pipeline_rules.py

Called by: pytest
Depends on: outreach/services/pipeline_rules.py
"""

import pytest

from outreach.constants import Outcome, PipelineStage, stage_rank
from outreach.services.pipeline_rules import next_stage


class TestNextStage:
    @pytest.mark.parametrize("outcome", [None, "no_answer", "voicemail", "meeting_set", "bogus"])
    def test_cold_always_becomes_contacted(self, outcome):
        assert next_stage("cold", outcome) == PipelineStage.CONTACTED

    @pytest.mark.parametrize("outcome", ["connected", "interested", "replied", "callback_requested"])
    def test_contacted_to_warm(self, outcome):
        assert next_stage("contacted", outcome) == PipelineStage.WARM

    @pytest.mark.parametrize("outcome", ["meeting_set", "proposal_requested"])
    def test_contacted_to_hot(self, outcome):
        assert next_stage(PipelineStage.CONTACTED, outcome) == PipelineStage.HOT

    @pytest.mark.parametrize("outcome", [None, "no_answer", "voicemail", "not_interested", "sent"])
    def test_contacted_stays(self, outcome):
        assert next_stage("contacted", outcome) is None

    def test_warm_to_hot(self):
        assert next_stage("warm", Outcome.MEETING_SET) == PipelineStage.HOT
        assert next_stage("warm", "proposal_requested") == PipelineStage.HOT

    @pytest.mark.parametrize("outcome", ["connected", "interested", "no_answer", None])
    def test_warm_stays_without_hot_outcome(self, outcome):
        assert next_stage("warm", outcome) is None

    @pytest.mark.parametrize(
        "stage", ["hot", "proposal", "negotiation", "closed_won", "closed_lost", "dead"]
    )
    def test_late_stages_never_move(self, stage):
        for outcome in Outcome:
            assert next_stage(stage, outcome) is None

    @pytest.mark.parametrize("stage", [None, "", "prospect"])
    def test_unknown_stage(self, stage):
        assert next_stage(stage, "meeting_set") is None

    def test_never_moves_backwards(self):
        for stage in PipelineStage:
            for outcome in list(Outcome) + [None]:
                result = next_stage(stage, outcome)
                if result is not None:
                    assert stage_rank(result) > stage_rank(stage)
