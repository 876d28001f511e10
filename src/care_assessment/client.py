"""HTTP collaborators for the assessment backend.

Two adapters that let an :class:`~care_assessment.session.AssessmentSession`
talk to the ``care_assessment_server`` REST API:

  - HttpSubmitter:  POST ``/api/v1/assessments`` (async, ``httpx.AsyncClient``)
  - HttpDraftStore: GET/PUT/DELETE ``/api/v1/drafts/{key}`` (sync,
    ``httpx.Client``) so drafts follow the member across devices

Transport failures become :class:`NetworkError`; 400/422 become
:class:`ServerValidationError` with per-field messages when the body
carries FastAPI-style ``detail`` entries; any other error status becomes
:class:`ServerError`.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from care_assessment.errors import NetworkError, ServerError, ServerValidationError
from care_assessment.interfaces import Submitter
from care_assessment.models.draft import AssessmentDraft
from care_assessment.models.session import SubmissionResult
from care_assessment.storage import KeyValueStore

logger = logging.getLogger(__name__)

ASSESSMENTS_PATH = "/api/v1/assessments"
DRAFTS_PATH = "/api/v1/drafts"
API_KEY_HEADER = "X-API-Key"
DEFAULT_TIMEOUT = 10.0


def _headers(api_key: str | None) -> dict[str, str]:
    return {API_KEY_HEADER: api_key} if api_key else {}


def _field_errors(response: httpx.Response) -> dict[str, str]:
    """Pull ``{field: message}`` out of a 400/422 body, if it has any."""
    try:
        body = response.json()
    except ValueError:
        return {}
    if not isinstance(body, dict):
        return {}

    detail = body.get("detail")
    errors: dict[str, str] = {}
    if isinstance(detail, list):
        # FastAPI RequestValidationError: [{"loc": ["body", "field"], "msg": ...}]
        for item in detail:
            if not isinstance(item, dict):
                continue
            loc = item.get("loc") or []
            if loc and isinstance(loc[-1], str):
                errors[loc[-1]] = str(item.get("msg", "invalid"))
    elif isinstance(body.get("errors"), dict):
        errors = {str(k): str(v) for k, v in body["errors"].items()}
    return errors


class HttpSubmitter(Submitter):
    """Submits a finished draft to the backend.

    Args:
        base_url: server root, e.g. ``http://localhost:8080``
        timeout: per-request timeout in seconds
        api_key: sent as ``X-API-Key`` when the server requires one
        client: pre-built ``httpx.AsyncClient`` (tests pass one with a
            ``MockTransport``); when omitted, a client is created per call
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._api_key = api_key
        self._client = client

    async def submit(self, draft: AssessmentDraft) -> SubmissionResult:
        payload = draft.model_dump(mode="json")
        url = f"{self._base_url}{ASSESSMENTS_PATH}"

        try:
            if self._client is not None:
                response = await self._client.post(
                    url, json=payload, headers=_headers(self._api_key), timeout=self._timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, json=payload, headers=_headers(self._api_key))
        except httpx.TransportError as exc:
            logger.warning("Assessment submit for %s could not reach %s: %s", draft.member_id, url, exc)
            raise NetworkError(f"POST {url} failed: {exc}") from exc

        if response.status_code in (400, 422):
            raise ServerValidationError(
                f"POST {url} rejected with {response.status_code}",
                field_errors=_field_errors(response),
            )
        if response.status_code >= 400:
            raise ServerError(
                f"POST {url} failed with {response.status_code}",
                status_code=response.status_code,
            )

        return self._parse_result(response, draft)

    @staticmethod
    def _parse_result(response: httpx.Response, draft: AssessmentDraft) -> SubmissionResult:
        try:
            body: dict[str, Any] = response.json()
            return SubmissionResult.model_validate({
                "assessment_id": str(body["id"]),
                "member_id": body.get("member_id") or draft.member_id,
                "submitted_at": body.get("created_at"),
            })
        except (ValueError, KeyError, TypeError) as exc:
            # pydantic.ValidationError is a ValueError
            raise ServerError(
                f"Unexpected submit response body: {response.text[:200]!r}",
                status_code=response.status_code,
            ) from exc


class HttpDraftStore(KeyValueStore):
    """Key/value store backed by the server's ``/drafts`` endpoints.

    Failures raise ``httpx.HTTPError``; :class:`DraftPersistence` logs and
    absorbs them like any other store failure.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        api_key: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self._client = client or httpx.Client(timeout=timeout)
        self._base_url = base_url.rstrip("/")
        self._headers = _headers(api_key)

    def _url(self, key: str) -> str:
        return f"{self._base_url}{DRAFTS_PATH}/{quote(key, safe='')}"

    def get(self, key: str) -> str | None:
        response = self._client.get(self._url(key), headers=self._headers)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()["value"]

    def set(self, key: str, value: str) -> None:
        response = self._client.put(self._url(key), json={"value": value}, headers=self._headers)
        response.raise_for_status()

    def remove(self, key: str) -> None:
        response = self._client.delete(self._url(key), headers=self._headers)
        if response.status_code != 404:
            response.raise_for_status()

    def close(self) -> None:
        self._client.close()
