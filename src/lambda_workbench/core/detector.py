"""Detection of function entry points in source trees."""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from .manifest.models import EventType

log = logging.getLogger(__name__)

ENTRY_POINT_FILENAME = "main.go"
LAMBDA_IMPORT = "github.com/aws/aws-lambda-go/lambda"

EVENT_TYPE_PATTERNS = [
    (re.compile(r"events\.APIGatewayProxyRequest"), EventType.APIGATEWAY),
    (re.compile(r"events\.S3Event"), EventType.S3),
    (re.compile(r"events\.DynamoDBEvent"), EventType.DYNAMODB),
    (re.compile(r"events\.SQSEvent"), EventType.SQS),
]


def has_lambda_import(content: str) -> bool:
    return LAMBDA_IMPORT in content


def is_function_source(source_file: Union[str, Path]) -> bool:
    """True for a ``main.go`` that imports the Lambda runtime package."""
    path = Path(source_file)
    if path.name != ENTRY_POINT_FILENAME:
        return False

    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        log.debug(f"Cannot read {path}: {e}")
        return False

    if has_lambda_import(content):
        log.debug(f"Function source detected: {path}")
        return True

    log.debug(f"{path} is {ENTRY_POINT_FILENAME} but does not import {LAMBDA_IMPORT}")
    return False


def detect_event_type(content: str) -> Optional[str]:
    """Guess the event type from the handler's event struct."""
    for pattern, event_type in EVENT_TYPE_PATTERNS:
        if pattern.search(content):
            return event_type.value
    return None
