"""
Payload Record Source

Accepts records built by the web client. No parsing is done here; records are
taken as supplied.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..errors import InvalidArgumentError
from ..records import FormRecord


def records_from_payload(records: Any) -> list[FormRecord]:
    """Validate a client-supplied array of records."""
    if not records or not isinstance(records, list):
        raise InvalidArgumentError('The function must be called with an array of "records".')

    result: list[FormRecord] = []
    for index, item in enumerate(records, start=1):
        if isinstance(item, FormRecord):
            result.append(item)
            continue
        if not isinstance(item, Mapping):
            raise InvalidArgumentError(f"Record {index} must be an object.")
        try:
            result.append(FormRecord.model_validate(dict(item)))
        except ValidationError as e:
            raise InvalidArgumentError(f"Record {index} is invalid: {e.errors()[0]['msg']}") from e

    return result
