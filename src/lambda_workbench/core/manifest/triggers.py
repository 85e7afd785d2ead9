"""Event trigger skeletons and event-type inference."""

import copy
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .models import EventType


class TriggerType(str, Enum):
    """Values of the ``Type`` discriminator of a SAM function event."""

    API = "Api"
    S3 = "S3"
    DYNAMODB = "DynamoDB"
    SQS = "SQS"
    SCHEDULE = "Schedule"


# Schedule has no event type of its own and falls back to the default
TRIGGER_EVENT_TYPES: Dict[TriggerType, EventType] = {
    TriggerType.API: EventType.APIGATEWAY,
    TriggerType.S3: EventType.S3,
    TriggerType.DYNAMODB: EventType.DYNAMODB,
    TriggerType.SQS: EventType.SQS,
}

_TRIGGER_SKELETONS: Dict[str, Dict[str, Any]] = {
    EventType.APIGATEWAY.value: {
        "ApiEvent": {
            "Type": TriggerType.API.value,
            "Properties": {"Path": "/hello", "Method": "get"},
        }
    },
    EventType.S3.value: {
        "S3Event": {
            "Type": TriggerType.S3.value,
            "Properties": {
                "Bucket": {"Ref": "S3Bucket"},
                "Events": "s3:ObjectCreated:*",
                "Filter": {
                    "S3Key": {"Rules": [{"Name": "prefix", "Value": "uploads/"}]}
                },
            },
        }
    },
    EventType.DYNAMODB.value: {
        "DynamoDBEvent": {
            "Type": TriggerType.DYNAMODB.value,
            "Properties": {
                "Stream": {"Fn::GetAtt": ["DynamoDBTable", "StreamArn"]},
                "StartingPosition": "TRIM_HORIZON",
                "BatchSize": 10,
            },
        }
    },
    EventType.SQS.value: {
        "SQSEvent": {
            "Type": TriggerType.SQS.value,
            "Properties": {
                "Queue": {"Fn::GetAtt": ["SQSQueue", "Arn"]},
                "BatchSize": 10,
            },
        }
    },
}

_SCHEDULE_SKELETON: Dict[str, Any] = {
    "DefaultEvent": {
        "Type": TriggerType.SCHEDULE.value,
        "Properties": {"Schedule": "rate(10 minutes)"},
    }
}


def trigger_skeleton(event_type: str) -> Dict[str, Any]:
    """Return the ``Events`` section for a new manifest.

    Unknown event types get a time-based schedule trigger.
    """
    skeleton = _TRIGGER_SKELETONS.get(event_type, _SCHEDULE_SKELETON)
    return copy.deepcopy(skeleton)


def match_trigger(events: Any) -> Optional[EventType]:
    """Map the first trigger's ``Type`` to an event type.

    Returns None when there are no triggers or the discriminator is not one
    with an associated event type.
    """
    if not isinstance(events, Mapping) or not events:
        return None

    first = next(iter(events.values()))
    if not isinstance(first, Mapping):
        return None

    try:
        trigger_type = TriggerType(first.get("Type"))
    except ValueError:
        return None
    return TRIGGER_EVENT_TYPES.get(trigger_type)
