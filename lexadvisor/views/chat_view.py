"""
Chat View
=========

Conversation list, transcript and streamed assistant replies for the
signed-in user.

State
-----
- ``conversations``: own conversations, most recently updated first
- ``active_conversation_id``: the selected conversation (first one by default)
- ``messages``: transcript of the active conversation, oldest first
- ``is_loading`` / ``is_streaming``: a reply is being produced

Sending a message
-----------------
1. Without an active conversation one is created, titled from the message.
2. The user message is appended locally and persisted.
3. On the first message of a conversation its title is derived from the
   message (50 characters, ``...`` when truncated).
4. The completion endpoint is streamed; every snapshot replaces the text of
   a local assistant message.
5. The finished assistant message is persisted and the conversation's
   ``updated_at`` is touched.

`stream_message` yields the snapshots (the SSE route relays them);
`send_message` drives the same flow to completion and turns failures into a
destructive `Notice`. `close()` cancels an in-flight stream; no state changes
after it.
"""

import logging
import uuid

from lexadvisor.api.completion_client import CancelToken, CompletionClient
from lexadvisor.api.errors import CompletionError
from lexadvisor.database.entities.conversations import DEFAULT_CONVERSATION_TITLE
from lexadvisor.database.entities.enums import MessageRole, utcnow
from lexadvisor.views.audit import CONVERSATION_DELETE, AuditLogger
from lexadvisor.views.navigation import require_access
from lexadvisor.views.notices import Notice, NoticeError, failure, success

logger = logging.getLogger(__name__)

TITLE_LENGTH = 50

SUGGESTED_PROMPTS = (
    "What are my rights as a tenant?",
    "How do I file a small claims case?",
    "What is breach of contract?",
    "Explain employment discrimination laws",
)


def derive_title(content: str) -> str:
    """First 50 characters of ``content``, with ``...`` when truncated."""
    return content[:TITLE_LENGTH] + ("..." if len(content) > TITLE_LENGTH else "")


def _local_message(role: str, content: str) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "role": role,
        "content": content,
        "sources": None,
        "created_at": utcnow().isoformat(),
    }


class ChatView:
    """
    Server-side state of the chat screen.

    Parameters
    ----------
    store : SessionStore
        Signed-in session.
    completion_client : CompletionClient, optional
        Defaults to one built from settings.
    audit : AuditLogger, optional
    """

    suggested_prompts = SUGGESTED_PROMPTS

    def __init__(self, store, completion_client: CompletionClient | None = None, audit: AuditLogger | None = None):
        require_access(store, "/chat")
        self.store = store
        self.completion_client = completion_client or CompletionClient.from_settings()
        self.audit = audit or AuditLogger(store)
        self.conversations: list[dict] = []
        self.active_conversation_id: str | None = None
        self.messages: list[dict] = []
        self.is_loading = False
        self.is_streaming = False
        self._cancel: CancelToken | None = None
        self._closed = False

    @property
    def gateway(self):
        return self.store.gateway

    # ------------------------------------------------------------------
    # conversations
    # ------------------------------------------------------------------
    def load_conversations(self) -> Notice | None:
        """Fetch own conversations and auto-select the first one."""
        res = (
            self.gateway.table("conversations")
            .select("*")
            .eq("user_id", self.store.user.id)
            .order("updated_at", ascending=False)
            .execute()
        )
        if res.error:
            logger.error(f"Error fetching conversations: {res.error.message}")
            return failure("Error", "Failed to load conversations")
        self.conversations = res.data
        if self.conversations and not self.active_conversation_id:
            self.select_conversation(self.conversations[0]["id"])
        return None

    def select_conversation(self, conversation_id: str | None) -> Notice | None:
        self.active_conversation_id = conversation_id
        return self.load_messages()

    def load_messages(self) -> Notice | None:
        """Fetch the transcript of the active conversation, oldest first."""
        if not self.active_conversation_id:
            self.messages = []
            return None
        res = (
            self.gateway.table("messages")
            .select("*")
            .eq("conversation_id", self.active_conversation_id)
            .order("created_at", ascending=True)
            .execute()
        )
        if res.error:
            logger.error(f"Error fetching messages: {res.error.message}")
            return failure("Error", "Failed to load messages")
        self.messages = res.data
        return None

    def _insert_conversation(self, title: str) -> dict | None:
        res = (
            self.gateway.table("conversations")
            .insert({"user_id": self.store.user.id, "title": title})
            .single()
            .execute()
        )
        if res.error:
            logger.error(f"Error creating conversation: {res.error.message}")
            return None
        self.conversations = [res.data] + self.conversations
        self.active_conversation_id = res.data["id"]
        self.messages = []
        return res.data

    def create_conversation(self) -> Notice:
        """Start an empty conversation titled "New Conversation" and select it."""
        if self._insert_conversation(DEFAULT_CONVERSATION_TITLE) is None:
            return failure("Error", "Failed to create conversation")
        return success("Conversation created")

    def delete_conversation(self, conversation_id: str) -> Notice:
        """Delete a conversation (its messages go with it)."""
        res = self.gateway.table("conversations").delete().eq("id", conversation_id).execute()
        if res.error:
            logger.error(f"Error deleting conversation: {res.error.message}")
            return failure("Error", "Failed to delete conversation")
        if not res.data:
            return failure("Error", "Failed to delete conversation", status=404)

        self.conversations = [c for c in self.conversations if c["id"] != conversation_id]
        if self.active_conversation_id == conversation_id:
            self.select_conversation(self.conversations[0]["id"] if self.conversations else None)
        self.audit.record(CONVERSATION_DELETE, {"conversation_id": conversation_id, "title": res.data[0]["title"]})
        return success("Conversation deleted")

    def _retitle(self, conversation_id: str, title: str) -> None:
        res = self.gateway.table("conversations").update({"title": title}).eq("id", conversation_id).execute()
        if res.error:
            logger.warning(f"Could not retitle conversation {conversation_id}: {res.error.message}")
            return
        self.conversations = [{**c, "title": title} if c["id"] == conversation_id else c for c in self.conversations]

    def _touch(self, conversation_id: str) -> None:
        res = self.gateway.table("conversations").update({"updated_at": utcnow()}).eq("id", conversation_id).execute()
        if res.error or not res.data:
            logger.warning(f"Could not touch conversation {conversation_id}")
            return
        others = [c for c in self.conversations if c["id"] != conversation_id]
        self.conversations = [res.data[0]] + others

    def _persist_message(self, conversation_id: str, role: str, content: str) -> None:
        res = (
            self.gateway.table("messages")
            .insert({"conversation_id": conversation_id, "role": role, "content": content})
            .execute()
        )
        if res.error:
            logger.warning(f"Could not save {role} message in {conversation_id}: {res.error.message}")

    # ------------------------------------------------------------------
    # messages
    # ------------------------------------------------------------------
    async def stream_message(self, content: str):
        """
        Send ``content`` and yield the assistant reply as it grows.

        Yields
        ------
        str
            Accumulated reply text.

        Raises
        ------
        NoticeError
            The conversation could not be created.
        CompletionError
            The completion endpoint failed (see `lexadvisor.api.errors`).
        """
        content = (content or "").strip()
        if not content or self._closed:
            return

        conversation_id = self.active_conversation_id
        if not conversation_id:
            created = self._insert_conversation(derive_title(content))
            if created is None:
                raise NoticeError(failure("Error", "Failed to create conversation"))
            conversation_id = created["id"]

        first_message = len(self.messages) == 0
        user_message = _local_message(MessageRole.USER.value, content)
        self.messages = self.messages + [user_message]
        self.is_loading = True
        self._persist_message(conversation_id, MessageRole.USER.value, content)
        if first_message:
            self._retitle(conversation_id, derive_title(content))

        history = [{"role": m["role"], "content": m["content"]} for m in self.messages]
        self._cancel = CancelToken()
        assistant = None
        try:
            self.is_streaming = True
            async for snapshot in self.completion_client.stream(history, conversation_id, cancel=self._cancel):
                if self._closed:
                    return
                if assistant is None:
                    assistant = _local_message(MessageRole.ASSISTANT.value, snapshot)
                    self.messages = self.messages + [assistant]
                else:
                    assistant["content"] = snapshot
                yield snapshot

            if self._closed:
                return
            self._persist_message(conversation_id, MessageRole.ASSISTANT.value, assistant["content"] if assistant else "")
            self._touch(conversation_id)
        finally:
            self.is_loading = False
            self.is_streaming = False
            self._cancel = None

    async def send_message(self, content: str) -> Notice | None:
        """
        Run `stream_message` to completion.

        Returns
        -------
        Notice | None
            A destructive notice on failure, None on success.
        """
        try:
            async for _ in self.stream_message(content):
                pass
        except NoticeError as e:
            return e.notice
        except CompletionError as e:
            logger.error(f"Error streaming response: {e}")
            return failure("Error", e.user_message, status=e.status_code)
        return None

    def close(self) -> None:
        """Tear the view down; an in-flight reply stops without further updates."""
        self._closed = True
        if self._cancel is not None:
            self._cancel.cancel()
