import json

import httpx
import pytest

from lexadvisor.api.completion_client import CancelToken, CompletionClient
from lexadvisor.api.errors import CompletionRequestError, PaymentRequiredError, RateLimitedError

from tests.conftest import DONE, delta_frame


async def collect(client, messages=None, conversation_id="c-1", cancel=None) -> list[str]:
    messages = messages or [{"role": "user", "content": "Can my landlord keep the deposit?"}]
    return [snapshot async for snapshot in client.stream(messages, conversation_id, cancel=cancel)]


@pytest.mark.asyncio
async def test_streams_snapshots_and_sends_history(completion_factory):
    requests = []
    payload = delta_frame("Usually ") + delta_frame("not.") + DONE
    client = completion_factory([payload[:10], payload[10:40], payload[40:]], requests=requests)

    history = [
        {"role": "user", "content": "Can my landlord keep the deposit?", "id": "ignored"},
    ]
    snapshots = await collect(client, history, conversation_id="conv-42")

    assert snapshots == ["Usually ", "Usually not."]
    request = requests[0]
    assert request.method == "POST"
    assert request.headers["authorization"] == "Bearer test-completion-key"
    assert json.loads(request.content) == {
        "messages": [{"role": "user", "content": "Can my landlord keep the deposit?"}],
        "conversationId": "conv-42",
    }


@pytest.mark.asyncio
async def test_no_authorization_header_without_key():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, content=DONE)

    client = CompletionClient("http://completion.test/v1/chat", transport=httpx.MockTransport(handler))
    assert await collect(client) == []
    assert "authorization" not in requests[0].headers


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error_cls, message",
    [
        (429, RateLimitedError, "Rate limit exceeded. Please try again later."),
        (402, PaymentRequiredError, "Payment required. Please add credits to continue."),
        (500, CompletionRequestError, "Failed to get response"),
    ],
)
async def test_error_statuses_are_classified(completion_factory, status, error_cls, message):
    client = completion_factory([b'{"error":"nope"}'], status=status)
    with pytest.raises(error_cls) as excinfo:
        await collect(client)
    assert excinfo.value.user_message == message
    assert excinfo.value.status_code == (502 if status == 500 else status)


@pytest.mark.asyncio
async def test_transport_failure_becomes_request_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = CompletionClient("http://completion.test/v1/chat", transport=httpx.MockTransport(handler))
    with pytest.raises(CompletionRequestError):
        await collect(client)


@pytest.mark.asyncio
async def test_cancel_stops_after_current_snapshot(completion_factory):
    client = completion_factory([delta_frame("A"), delta_frame("B"), delta_frame("C"), DONE])
    token = CancelToken()
    snapshots = []
    async for snapshot in client.stream([{"role": "user", "content": "hi"}], "c-1", cancel=token):
        snapshots.append(snapshot)
        token.cancel()
    assert snapshots == ["A"]
    assert token.cancelled


@pytest.mark.asyncio
async def test_malformed_line_does_not_stop_the_reply(completion_factory):
    chunks = [b"data: {broken\n", delta_frame("A"), delta_frame("B"), delta_frame("C"), DONE]
    client = completion_factory(chunks)
    snapshots = await collect(client)
    assert snapshots[-1] == "ABC"
