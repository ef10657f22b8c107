# tests/test_client.py
import logging

import httpx
import pytest

from api.models.therapy import ScheduleRequest, TherapyStatus
from therapy_client import TherapyServiceClient
from tests.conftest import at


def request(priority=1, patient_id="patient-1"):
    return ScheduleRequest(
        patient_id=patient_id, practitioner_id="P1", time_slot=at(10), priority=priority
    )


def test_client_round_trip(therapy_client):
    a = therapy_client.schedule_therapy(request(priority=1))
    b = therapy_client.schedule_therapy(request(priority=2, patient_id="patient-2"))

    assert a.status == TherapyStatus.SCHEDULED
    assert b.status == TherapyStatus.WAITING
    assert [s.id for s in therapy_client.get_ready_therapies()] == [a.id]
    assert [s.id for s in therapy_client.get_waiting_therapies()] == [b.id]

    moved = therapy_client.move_to_waiting_queue(a.id, "Practitioner emergency")
    assert moved.reason == "Practitioner emergency"

    summary = therapy_client.reschedule_therapies()
    assert summary.promoted == 2
    assert therapy_client.get_therapy(b.id).time_slot == at(11)

    assert therapy_client.complete_therapy(a.id).status == TherapyStatus.COMPLETED
    assert therapy_client.cancel_therapy(b.id).status == TherapyStatus.CANCELLED


def test_client_sends_bearer_token_per_request():
    seen = []

    def handler(req: httpx.Request) -> httpx.Response:
        seen.append(req.headers.get("authorization"))
        return httpx.Response(200, json=[])

    http = httpx.Client(
        base_url="http://scheduler.local/api", transport=httpx.MockTransport(handler)
    )
    client = TherapyServiceClient(http_client=http, token="test-token")

    client.get_waiting_therapies()

    assert seen == ["Bearer test-token"]
    assert "authorization" not in http.headers


def test_client_logs_and_raises_on_error(therapy_client, caplog):
    with caplog.at_level(logging.ERROR, logger="therapy_client.client"):
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            therapy_client.move_to_waiting_queue("missing", "Practitioner emergency")

    assert exc_info.value.response.status_code == 404
    assert "Error moving therapy to waiting queue" in caplog.text


def test_client_uses_configured_base_url():
    def handler(req: httpx.Request) -> httpx.Response:
        assert req.url == "http://scheduler.local/api/therapies/ready"
        assert "authorization" not in req.headers
        return httpx.Response(200, json=[])

    http = httpx.Client(
        base_url="http://scheduler.local/api", transport=httpx.MockTransport(handler)
    )
    client = TherapyServiceClient(http_client=http, token="")

    assert client.get_ready_therapies() == []
