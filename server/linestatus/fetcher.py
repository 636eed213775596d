"""Account-info retrieval against the provider's broadband API.

The upstream answers 200 even when the login is wrong or the service is
unknown; the failure only shows up as an empty ``info`` list and a message in
``error``. A call therefore succeeds only when the status is 200 *and* at
least one record came back.
"""

from __future__ import annotations

import json
from typing import Dict

import httpx
from pydantic import ValidationError

from .logging_utils import get_logger
from .models import AccountRecord, Credentials, InfoEnvelope

logger = get_logger("fetcher")

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
USER_AGENT = "LineStatus/0.1"


class FetchError(Exception):
    """Base class for every way an account-info lookup can fail."""


class TransportError(FetchError):
    def __init__(self, message: str = "failed to make POST request") -> None:
        super().__init__(message)


class TransportStatusError(FetchError):
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"upstream returned HTTP {status_code}")


class NoRecordError(FetchError):
    def __init__(self, message: str = "") -> None:
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"upstream returned no account record{detail}")


class DecodeError(FetchError):
    def __init__(self, message: str = "failed to decode upstream response") -> None:
        super().__init__(message)


def _post_account_info(url: str, payload: Dict[str, str]) -> httpx.Response:
    headers = {
        "Content-Type": JSON_CONTENT_TYPE,
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }
    with httpx.Client(timeout=None) as client:
        return client.post(url, json=payload, headers=headers)


def _decode_envelope(body: bytes) -> InfoEnvelope:
    try:
        raw = json.loads(body)
    except ValueError as exc:
        raise DecodeError("upstream response is not valid JSON") from exc

    if not isinstance(raw, dict):
        raise DecodeError(f"upstream response had unexpected payload type={type(raw).__name__}")

    try:
        return InfoEnvelope.model_validate(raw)
    except ValidationError as exc:
        raise DecodeError("upstream response does not match the info envelope") from exc


def fetch_account_info(credentials: Credentials, *, url: str) -> AccountRecord:
    try:
        response = _post_account_info(url, credentials.to_payload())
    except httpx.RequestError as exc:
        logger.error("Account info request failed (network): %s", exc)
        raise TransportError() from exc

    if response.status_code != 200:
        logger.warning("Account info request failed status=%s", response.status_code)
        raise TransportStatusError(response.status_code)

    envelope = _decode_envelope(response.content)

    if not envelope.info:
        logger.warning(
            "Account info response had no records login=%s error=%s",
            credentials.login,
            envelope.error or "<none>",
        )
        raise NoRecordError(envelope.error)

    if envelope.error:
        logger.warning("Account info response carried records and error=%s", envelope.error)
    if len(envelope.info) > 1:
        logger.debug("Account info response had %s records; using the first", len(envelope.info))

    try:
        return AccountRecord.model_validate(envelope.info[0])
    except ValidationError as exc:
        raise DecodeError("first upstream record does not match the account record") from exc
