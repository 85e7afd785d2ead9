"""Sample event payloads used to invoke a function locally."""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from ..config import FunctionPaths
from .manifest.models import EventType

log = logging.getLogger(__name__)

_EVENT_PAYLOADS: Dict[str, Dict[str, Any]] = {
    EventType.APIGATEWAY.value: {
        "resource": "/{proxy+}",
        "path": "/hello",
        "httpMethod": "GET",
        "headers": {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Host": "example.execute-api.us-east-1.amazonaws.com",
            "User-Agent": "lambda-workbench/1.0",
            "X-Forwarded-For": "192.0.2.1",
            "X-Forwarded-Port": "443",
            "X-Forwarded-Proto": "https",
        },
        "multiValueHeaders": {},
        "queryStringParameters": {"name": "world"},
        "multiValueQueryStringParameters": {},
        "pathParameters": {"proxy": "hello"},
        "stageVariables": None,
        "requestContext": {
            "accountId": "123456789012",
            "apiId": "1234567890",
            "httpMethod": "GET",
            "path": "/hello",
            "stage": "test",
            "requestId": "c6af9ac6-7b61-11e6-9a41-93e8deadbeef",
            "requestTimeEpoch": 1428582896000,
            "resourceId": "123456",
            "resourcePath": "/{proxy+}",
        },
        "body": None,
        "isBase64Encoded": False,
    },
    EventType.S3.value: {
        "Records": [
            {
                "eventVersion": "2.1",
                "eventSource": "aws:s3",
                "awsRegion": "us-east-1",
                "eventTime": "2021-01-01T12:00:00.000Z",
                "eventName": "ObjectCreated:Put",
                "userIdentity": {"principalId": "EXAMPLE"},
                "requestParameters": {"sourceIPAddress": "192.0.2.3"},
                "s3": {
                    "s3SchemaVersion": "1.0",
                    "configurationId": "testConfigRule",
                    "bucket": {
                        "name": "example-bucket",
                        "ownerIdentity": {"principalId": "EXAMPLE"},
                        "arn": "arn:aws:s3:::example-bucket",
                    },
                    "object": {
                        "key": "uploads/test-file.jpg",
                        "size": 1024,
                        "eTag": "d41d8cd98f00b204e9800998ecf8427e",
                        "sequencer": "0055AED6DCD90281E5",
                    },
                },
            }
        ]
    },
    EventType.DYNAMODB.value: {
        "Records": [
            {
                "eventID": "1",
                "eventVersion": "1.0",
                "dynamodb": {
                    "Keys": {"Id": {"N": "101"}},
                    "NewImage": {"Message": {"S": "New item!"}, "Id": {"N": "101"}},
                    "StreamViewType": "NEW_AND_OLD_IMAGES",
                    "SequenceNumber": "111",
                    "SizeBytes": 26,
                },
                "awsRegion": "us-west-2",
                "eventName": "INSERT",
                "eventSourceARN": (
                    "arn:aws:dynamodb:us-west-2:123456789012:table/ExampleTable/stream/"
                    "2015-06-27T00:48:05.899"
                ),
                "eventSource": "aws:dynamodb",
            }
        ]
    },
    EventType.SQS.value: {
        "Records": [
            {
                "messageId": "19dd0b57-b21e-4ac1-bd88-01bbb068cb78",
                "receiptHandle": "MessageReceiptHandle",
                "body": "Hello from SQS!",
                "attributes": {
                    "ApproximateReceiveCount": "1",
                    "SentTimestamp": "1523232000000",
                    "SenderId": "123456789012",
                    "ApproximateFirstReceiveTimestamp": "1523232000001",
                },
                "messageAttributes": {},
                "md5OfBody": "7b270e59b47ff90a553787216d55d91d",
                "eventSource": "aws:sqs",
                "eventSourceARN": "arn:aws:sqs:us-east-1:123456789012:MyQueue",
                "awsRegion": "us-east-1",
            }
        ]
    },
}


def event_payload(event_type: str) -> Dict[str, Any]:
    """Sample payload for ``event_type``; API Gateway for unknown types."""
    payload = _EVENT_PAYLOADS.get(event_type, _EVENT_PAYLOADS[EventType.APIGATEWAY.value])
    return copy.deepcopy(payload)


def write_event_file(
    function_dir: Union[str, Path], event_type: str, overwrite: bool = False
) -> Path:
    """Write ``event.json`` for a function.

    An existing event file is kept unless ``overwrite`` is set, since users
    usually edit it by hand.
    """
    event_file = FunctionPaths.for_dir(function_dir).event_file
    if event_file.exists() and not overwrite:
        log.debug(f"Keeping existing event file {event_file}")
        return event_file

    event_file.write_text(json.dumps(event_payload(event_type), indent=2), encoding="utf-8")
    log.info(f"Created event file at: {event_file}")
    return event_file
