"""
Scoring Service Client
=======================
Owns the single ``POST /predict`` exchange with the remote scoring
service: payload serialisation, a hard client-side timeout, response
decoding, and classification of every way the exchange can fail.
"""

from __future__ import annotations

import asyncio
import logging
import os
from enum import Enum
from typing import Mapping, Optional

import httpx
from pydantic import BaseModel

from heartguard.app.schemas import PredictionRequest, PredictionResponse, PredictionResult

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
API_URL = os.getenv("HEARTGUARD_API_URL", "http://localhost:8000")
REQUEST_TIMEOUT = 10.0
PREDICT_PATH = "/predict"
UNEXPECTED_RESPONSE = "Unexpected response from the prediction service"


class FailureKind(str, Enum):
    SERVER_ERROR = "server_error"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    REQUEST_FAILURE = "request_failure"
    INTERNAL = "internal"


# ===================================================================
# Error taxonomy
# ===================================================================

class PredictionError(Exception):
    """Base class for a failed exchange; ``message`` is user-facing."""
    kind: FailureKind = FailureKind.REQUEST_FAILURE

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ServerError(PredictionError):
    """The service answered, but not with a usable prediction."""
    kind = FailureKind.SERVER_ERROR

    def __init__(self, status_code: Optional[int], detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(detail or f"Server error: {status_code}")


class Unreachable(PredictionError):
    """The request went out but no response came back."""
    kind = FailureKind.UNREACHABLE

    def __init__(self, url: str, message: Optional[str] = None):
        self.url = url
        super().__init__(
            message
            or f"Cannot connect to the prediction service at {url}. "
            "Make sure the backend is running."
        )


class Timeout(Unreachable):
    kind = FailureKind.TIMEOUT

    def __init__(self, url: str, seconds: float):
        self.seconds = seconds
        super().__init__(
            url,
            f"The prediction service did not respond within {seconds:g} seconds.",
        )


class RequestFailure(PredictionError):
    """The request could not be built or dispatched at all."""
    kind = FailureKind.REQUEST_FAILURE

    def __init__(self, message: str = "Failed to make prediction request."):
        super().__init__(message)


class SubmissionOutcome(BaseModel):
    """Declared result of one exchange: a result or a classified failure."""
    result: Optional[PredictionResult] = None
    failure: Optional[FailureKind] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def _error_detail(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    detail = data.get("detail") if isinstance(data, dict) else None
    if isinstance(detail, str) and detail.strip():
        return detail
    return None


class PredictionClient:
    """Async client for the scoring service.

    Parameters
    ----------
    base_url : str
        Service root, e.g. ``http://localhost:8000``.
    timeout : float
        Total seconds allowed for the exchange.
    transport : httpx.AsyncBaseTransport, optional
        Injected transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str = API_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}{PREDICT_PATH}"

    async def _post(self, body: dict) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await asyncio.wait_for(
                client.post(
                    self.url,
                    json=body,
                    headers={"Content-Type": "application/json"},
                ),
                timeout=self.timeout,
            )

    async def submit(
        self, request: PredictionRequest, snapshot: Mapping[str, str]
    ) -> PredictionResult:
        """Run one exchange and return the decoded result.

        Raises
        ------
        ServerError, Unreachable, Timeout, RequestFailure
        """
        body = request.model_dump(by_alias=True)
        log.info("Sending prediction request to %s: %s", self.url, body)

        try:
            response = await self._post(body)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            log.warning("Prediction request timed out after %ss", self.timeout)
            raise Timeout(self.url, self.timeout) from exc
        except (httpx.UnsupportedProtocol, httpx.InvalidURL, httpx.LocalProtocolError) as exc:
            log.error("Prediction request could not be sent: %s", exc)
            raise RequestFailure() from exc
        except httpx.TransportError as exc:
            log.warning("Prediction service unreachable at %s: %s", self.url, exc)
            raise Unreachable(self.url) from exc
        except httpx.DecodingError as exc:
            log.error("Undecodable prediction response body: %s", exc)
            raise ServerError(None, UNEXPECTED_RESPONSE) from exc
        except httpx.RequestError as exc:
            log.warning("Prediction request to %s got no usable response: %s", self.url, exc)
            raise Unreachable(self.url) from exc

        if not response.is_success:
            detail = _error_detail(response)
            log.warning(
                "Prediction service returned %s: %s",
                response.status_code, detail or "(no detail)",
            )
            raise ServerError(response.status_code, detail)

        try:
            decoded = PredictionResponse.model_validate(response.json())
        except ValueError as exc:
            log.error("Undecodable prediction response: %s", exc)
            raise ServerError(response.status_code, UNEXPECTED_RESPONSE) from exc

        log.info("Received prediction response: %s", decoded.model_dump())
        return PredictionResult.from_response(decoded, dict(snapshot))

    async def settle(
        self, request: PredictionRequest, snapshot: Mapping[str, str]
    ) -> SubmissionOutcome:
        """Like :meth:`submit`, but report failure as a value."""
        try:
            result = await self.submit(request, snapshot)
        except PredictionError as exc:
            return SubmissionOutcome(failure=exc.kind, message=exc.message)
        return SubmissionOutcome(result=result)
