"""
Client for the therapy scheduling endpoints.

Mirrors the portal's therapyService: every call logs failures and re-raises
them to the caller. No retries.
"""

import logging
from typing import Any, Optional

import httpx

from api.models.therapy import RescheduleSummary, ScheduleRequest, TherapySession
from config import get_settings

logger = logging.getLogger(__name__)


class TherapyServiceClient:
    """Typed wrapper around the /therapies API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        settings = get_settings()
        token = token if token is not None else settings.api_token
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}

        if http_client is not None:
            self._http = http_client
        else:
            self._http = httpx.Client(
                base_url=base_url or settings.api_base_url,
                timeout=timeout or settings.request_timeout_seconds,
            )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "TherapyServiceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self, action: str, method: str, path: str, json: Optional[dict] = None
    ) -> Any:
        try:
            response = self._http.request(
                method, path, json=json, headers=self._headers
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.error(f"Error {action}: {e}")
            raise

    def schedule_therapy(self, request: ScheduleRequest) -> TherapySession:
        """Schedule a new therapy session."""
        data = self._request(
            "scheduling therapy",
            "POST",
            "/therapies/schedule",
            json=request.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return TherapySession.model_validate(data)

    def get_ready_therapies(self) -> list[TherapySession]:
        """Get the ready queue (scheduled therapies)."""
        data = self._request("fetching ready therapies", "GET", "/therapies/ready")
        return [TherapySession.model_validate(item) for item in data]

    def get_waiting_therapies(self) -> list[TherapySession]:
        """Get the waiting queue."""
        data = self._request("fetching waiting therapies", "GET", "/therapies/waiting")
        return [TherapySession.model_validate(item) for item in data]

    def move_to_waiting_queue(self, therapy_id: str, reason: str) -> TherapySession:
        """Move a therapy to the waiting queue."""
        data = self._request(
            "moving therapy to waiting queue",
            "PATCH",
            f"/therapies/cancel/{therapy_id}",
            json={"reason": reason},
        )
        return TherapySession.model_validate(data)

    def reschedule_therapies(self) -> RescheduleSummary:
        """Reschedule waiting therapies."""
        data = self._request("rescheduling therapies", "POST", "/therapies/reschedule")
        return RescheduleSummary.model_validate(data)

    def get_therapy(self, therapy_id: str) -> TherapySession:
        data = self._request("fetching therapy", "GET", f"/therapies/{therapy_id}")
        return TherapySession.model_validate(data)

    def complete_therapy(self, therapy_id: str) -> TherapySession:
        data = self._request(
            "completing therapy", "POST", f"/therapies/{therapy_id}/complete"
        )
        return TherapySession.model_validate(data)

    def cancel_therapy(
        self, therapy_id: str, reason: Optional[str] = None
    ) -> TherapySession:
        data = self._request(
            "cancelling therapy",
            "POST",
            f"/therapies/{therapy_id}/cancel",
            json={"reason": reason},
        )
        return TherapySession.model_validate(data)
