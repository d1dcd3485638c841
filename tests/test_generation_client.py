import pytest

from articlegen.errors import (
    EmptyGenerationResult,
    GenerationPollFailure,
    GenerationStartFailure,
    GenerationTaskFailure,
    GenerationTimeout,
)
from articlegen.schemas import ARTICLE_SCHEMA
from articlegen.services.generation import GenerationClient
from articlegen.services.http import TransportError

from fakes import FakeClock, FakeTransport, ok


def _client(config, transport, clock=None):
    clock = clock or FakeClock()
    return GenerationClient(
        config.firecrawl, config.jobs, transport=transport, clock=clock, sleep=clock.sleep
    )


def test_start_returns_task_id(config):
    transport = FakeTransport([ok({"success": True, "id": "agent-1"})])
    assert _client(config, transport).start("prompt") == "agent-1"
    call = transport.calls[0]
    assert call["url"] == "https://api.firecrawl.dev/v2/agent"
    assert call["payload"]["schema"] is ARTICLE_SCHEMA
    assert call["payload"]["maxCredits"] == 180


@pytest.mark.parametrize(
    "response",
    [
        ok({"success": False, "error": "bad prompt"}, status=400),
        ok({"success": True}),
        ok({"success": False, "id": "agent-1"}),
    ],
)
def test_start_rejected(config, response):
    with pytest.raises(GenerationStartFailure):
        _client(config, FakeTransport([response])).start("prompt")


def test_poll_returns_completed_payload_after_processing(config):
    clock = FakeClock()
    transport = FakeTransport(
        [
            ok({"success": True, "status": "processing"}),
            ok({"success": True, "status": "processing"}),
            ok({"success": True, "status": "completed", "data": {"title": "Done"}}),
        ]
    )
    raw = _client(config, transport, clock).poll("agent-1")
    assert raw.data == {"title": "Done"}
    assert clock.sleeps == [2.0, 2.0]
    assert transport.calls[0]["url"] == "https://api.firecrawl.dev/v2/agent/agent-1"
    assert transport.calls[0]["method"] == "GET"


def test_poll_failed_task_carries_reason(config):
    transport = FakeTransport([ok({"success": True, "status": "failed", "error": "quota"})])
    with pytest.raises(GenerationTaskFailure) as excinfo:
        _client(config, transport).poll("agent-1")
    assert excinfo.value.reason == "quota"
    assert str(excinfo.value) == "Agent failed: quota"


def test_poll_times_out_while_processing(config):
    clock = FakeClock()
    transport = FakeTransport([ok({"success": True, "status": "processing"})] * 10)
    with pytest.raises(GenerationTimeout):
        _client(config, transport, clock).poll("agent-1")
    # max wait 5s, interval 2s: polls at t=0, 2, 4, timeout detected at t=6
    assert len(transport.calls) == 3
    assert clock.now == 6.0


def test_poll_http_error_is_fatal_immediately(config):
    transport = FakeTransport(
        [ok({"success": False, "error": "Internal"}, status=500), ok({"success": True})]
    )
    with pytest.raises(GenerationPollFailure):
        _client(config, transport).poll("agent-1")
    assert len(transport.calls) == 1


def test_poll_transport_error_is_fatal(config):
    transport = FakeTransport([TransportError("timeout after 60s")])
    with pytest.raises(GenerationPollFailure):
        _client(config, transport).poll("agent-1")


def test_poll_completed_without_payload(config):
    transport = FakeTransport([ok({"success": True, "status": "completed", "data": None})])
    with pytest.raises(EmptyGenerationResult):
        _client(config, transport).poll("agent-1")


def test_generate_reports_task_id(config):
    seen = []
    transport = FakeTransport(
        [
            ok({"success": True, "id": "agent-9"}),
            ok({"success": True, "status": "completed", "data": {"title": "x"}}),
        ]
    )
    raw = _client(config, transport).generate("prompt", on_started=seen.append)
    assert seen == ["agent-9"]
    assert raw.get("title") == "x"
