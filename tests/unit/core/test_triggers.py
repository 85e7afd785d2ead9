"""Tests for trigger skeletons and event type inference."""

import pytest

from lambda_workbench.core.manifest.models import EventType
from lambda_workbench.core.manifest.triggers import (
    match_trigger,
    trigger_skeleton,
)


class TestTriggerSkeleton:
    @pytest.mark.parametrize(
        "event_type,trigger_type",
        [
            ("apigateway", "Api"),
            ("s3", "S3"),
            ("dynamodb", "DynamoDB"),
            ("sqs", "SQS"),
        ],
    )
    def test_skeleton_matches_event_type(self, event_type, trigger_type):
        events = trigger_skeleton(event_type)

        assert len(events) == 1
        assert next(iter(events.values()))["Type"] == trigger_type

    def test_unknown_event_type_gets_schedule(self):
        events = trigger_skeleton("kinesis")

        assert events["DefaultEvent"]["Type"] == "Schedule"
        assert events["DefaultEvent"]["Properties"]["Schedule"] == "rate(10 minutes)"

    def test_returns_independent_copies(self):
        first = trigger_skeleton("sqs")
        first["SQSEvent"]["Properties"]["BatchSize"] = 99

        assert trigger_skeleton("sqs")["SQSEvent"]["Properties"]["BatchSize"] == 10


class TestMatchTrigger:
    def test_skeletons_infer_back_to_their_event_type(self):
        for event_type in EventType:
            assert match_trigger(trigger_skeleton(event_type.value)) is event_type

    def test_first_trigger_wins(self):
        events = {
            "Stream": {"Type": "DynamoDB"},
            "Api": {"Type": "Api"},
        }
        assert match_trigger(events) is EventType.DYNAMODB

    @pytest.mark.parametrize(
        "events",
        [None, {}, [], {"Timer": {"Type": "Schedule"}}, {"Other": {"Type": "Kinesis"}}, {"Bad": "x"}],
    )
    def test_no_match(self, events):
        assert match_trigger(events) is None
