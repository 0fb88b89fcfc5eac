"""
Completion Endpoint Client
==========================

Opens the streaming legal-chat completion request, classifies its status and
feeds the body through :class:`~lexadvisor.api.stream_parser.StreamParser`.

Request
-------
``POST <COMPLETION_URL>`` with::

    {"messages": [{"role": "user", "content": "..."}, ...], "conversationId": "<uuid>"}

and ``Authorization: Bearer <COMPLETION_API_KEY>``.

Status classification (before any body is parsed)
-------------------------------------------------
- 429 -> `RateLimitedError`
- 402 -> `PaymentRequiredError`
- any other non-2xx, or a transport failure -> `CompletionRequestError`

Usage
-----
.. code-block:: python

    client = CompletionClient.from_settings()
    token = CancelToken()
    async for text in client.stream(history, conversation_id, cancel=token):
        render(text)   # the whole reply so far
"""

import logging

import httpx

from lexadvisor.api.errors import CompletionRequestError, PaymentRequiredError, RateLimitedError
from lexadvisor.api.stream_parser import StreamParser
from lexadvisor.database.config.config import settings

logger = logging.getLogger(__name__)


class CancelToken:
    """Cooperative cancellation flag checked between stream chunks."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class CompletionClient:
    """
    Client for the streaming completion endpoint.

    Parameters
    ----------
    url : str
        Endpoint URL.
    api_key : str
        Bearer key; omitted from the headers when empty.
    timeout : float
        httpx timeout in seconds.
    max_deferrals : int
        Passed to each `StreamParser`.
    transport : httpx.AsyncBaseTransport, optional
        Custom transport (tests use `httpx.MockTransport`).
    """

    def __init__(
        self,
        url: str,
        api_key: str = "",
        timeout: float = 60.0,
        max_deferrals: int = 8,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.max_deferrals = max_deferrals
        self._transport = transport

    @classmethod
    def from_settings(cls, transport: httpx.AsyncBaseTransport | None = None) -> "CompletionClient":
        """Build a client from the application `settings`."""
        return cls(
            url=settings.COMPLETION_URL,
            api_key=settings.COMPLETION_API_KEY,
            timeout=settings.HTTP_TIMEOUT,
            max_deferrals=settings.STREAM_MAX_DEFERRALS,
            transport=transport,
        )

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json", "Accept": "text/event-stream"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _classify(self, response: httpx.Response) -> None:
        if response.status_code == 429:
            raise RateLimitedError()
        if response.status_code == 402:
            raise PaymentRequiredError()
        if not response.is_success:
            body = await response.aread()
            logger.error(f"Completion endpoint returned {response.status_code}: {body[:500]!r}")
            raise CompletionRequestError(f"Completion endpoint returned {response.status_code}")

    async def stream(self, messages: list[dict], conversation_id: str | None = None, cancel: CancelToken | None = None):
        """
        Stream the assistant reply as accumulated-text snapshots.

        Parameters
        ----------
        messages : list[dict]
            Conversation history as ``{"role", "content"}`` dicts, oldest first.
        conversation_id : str | None
            Conversation the reply belongs to.
        cancel : CancelToken, optional
            Stops the stream between chunks; the upstream response is closed.

        Yields
        ------
        str
            The full reply text received so far.

        Raises
        ------
        CompletionError
            One of its subclasses, see module docstring.
        """
        parser = StreamParser(max_deferrals=self.max_deferrals)
        body = {
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "conversationId": conversation_id,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                async with client.stream("POST", self.url, json=body, headers=self._headers()) as response:
                    await self._classify(response)
                    async for chunk in response.aiter_bytes():
                        if cancel is not None and cancel.cancelled:
                            logger.info(f"Completion stream for conversation {conversation_id} cancelled")
                            return
                        for snapshot in parser.feed(chunk):
                            yield snapshot
                            if cancel is not None and cancel.cancelled:
                                logger.info(f"Completion stream for conversation {conversation_id} cancelled")
                                return
                    for snapshot in parser.close():
                        yield snapshot
        except httpx.HTTPError as e:
            logger.error(f"Error in CompletionClient.stream. Error: {e}")
            raise CompletionRequestError(str(e)) from e

        if parser.dropped_lines:
            logger.warning(f"Completion stream dropped {parser.dropped_lines} malformed line(s)")
