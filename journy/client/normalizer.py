"""
normalizer.py

Turns whatever a transport produced (a response, or a raised error) into a
uniform ``Success``/``Failure`` result.

Status codes map onto the closed ``APIError`` set; anything unmapped,
including failures that never produced a status code, becomes
``UnknownError``. The remaining call quota is read from the
``X-RateLimit-Remaining`` header when the server sent one. No retries happen
here: a 429 or 5xx is reported once and the caller decides what to do.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, Optional, TypeVar

from pydantic import ValidationError

from journy.client.schemas import APIError, Failure, Success
from journy.http.transport import request_id_from_body
from journy.http.types import HttpHeaders, HttpRequestError, HttpResponse

T = TypeVar("T")

RATE_LIMIT_REMAINING_HEADER = "X-RateLimit-Remaining"

STATUS_TO_ERROR: Dict[int, APIError] = {
    400: APIError.BadArgumentsError,
    401: APIError.UnauthorizedError,
    403: APIError.Forbidden,
    404: APIError.NotFoundError,
    422: APIError.Unprocessable,
    429: APIError.TooManyRequests,
    500: APIError.ServerError,
}


_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


class MalformedResponse(ValueError):
    pass


def status_code_to_error(status_code: Optional[int]) -> APIError:
    if status_code is None:
        return APIError.UnknownError
    return STATUS_TO_ERROR.get(status_code, APIError.UnknownError)


def calls_remaining(headers: Optional[HttpHeaders]) -> Optional[int]:
    if headers is None:
        return None
    remaining = headers.by_name(RATE_LIMIT_REMAINING_HEADER)
    if remaining is None:
        return None
    # leading sign and digits; trailing text is ignored
    match = _LEADING_INT.match(remaining)
    if match is None:
        return None
    return int(match.group(1))


def response_data(response: HttpResponse) -> Any:
    """Return the ``data`` field of a JSON response body."""
    try:
        parsed = json.loads(response.body)
    except (TypeError, ValueError) as e:
        raise MalformedResponse(f"Response body is not valid JSON: {e}") from e
    if not isinstance(parsed, dict) or "data" not in parsed:
        raise MalformedResponse("Response body has no data field")
    return parsed["data"]


def from_response(
    response: HttpResponse,
    parse: Optional[Callable[[Any], T]] = None,
):
    """Build a result from a received response.

    ``parse`` receives the body's ``data`` field; operations that carry no
    data leave it unset and get ``data=None``.
    """
    remaining = calls_remaining(response.headers)
    request_id = request_id_from_body(response.body)

    if not response.is_success:
        return Failure(
            request_id=request_id,
            calls_remaining=remaining,
            error=status_code_to_error(response.status_code),
        )

    if parse is None:
        return Success(request_id=request_id, calls_remaining=remaining, data=None)

    try:
        data = parse(response_data(response))
    except (MalformedResponse, ValidationError, KeyError, TypeError):
        return Failure(
            request_id=request_id,
            calls_remaining=remaining,
            error=APIError.UnknownError,
        )
    return Success(request_id=request_id, calls_remaining=remaining, data=data)


def from_error(error: Exception) -> Failure:
    if isinstance(error, HttpRequestError):
        return Failure(
            request_id=error.request_id,
            calls_remaining=calls_remaining(error.headers),
            error=status_code_to_error(error.status_code),
        )

    return Failure(
        request_id=None,
        calls_remaining=None,
        error=APIError.UnknownError,
    )
