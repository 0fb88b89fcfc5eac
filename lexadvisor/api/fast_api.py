"""
FastAPI Router - Auth • Conversations • Chat • Documents • Users • Logs
=======================================================================

Purpose
-------
Defines the HTTP API the single-page frontend talks to. Each request rebuilds
the caller's `SessionStore` from the `token` cookie and hands it to the view
behind the endpoint; the view reads and writes through the policy-scoped data
gateway.

Key Notes
---------
- Input validation via Pydantic models in `lexadvisor.api.models`.
- Auth cookie: `token` (JWT, HttpOnly).
- Status mapping:
    * 401 missing / invalid / expired token, failed login
    * 403 the role cannot open the view or perform the action
    * 404 target not found (or not visible to the caller)
    * 400 validation or backend failure, detail is the backend message
    * 429 / 402 relayed from the completion endpoint, 502 for its other failures
- Streaming responses (SSE) for chat replies: every frame is
  `data: {"response": <text so far>, "conversation_id": ..., "status": 200}`,
  the stream ends with `data: [DONE]`.
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, File, Form, HTTPException, Response, UploadFile
from fastapi.responses import StreamingResponse

from lexadvisor.api.aws_bucket_funcs.funcs import DocumentStorage
from lexadvisor.api.completion_client import CompletionClient
from lexadvisor.api.errors import AccessDeniedError, CompletionError
from lexadvisor.api.models import ChatRequest, RoleChange, UserCredentials, UserData
from lexadvisor.auth.session_store import SessionStore
from lexadvisor.views.chat_view import ChatView
from lexadvisor.views.documents_view import ALL_DOMAINS, DocumentsView
from lexadvisor.views.logs_view import LogsView, action_tone
from lexadvisor.views.navigation import landing_path, role_badge, visible_nav_items
from lexadvisor.views.notices import Notice, NoticeError
from lexadvisor.views.users_view import UsersView

logger = logging.getLogger(__name__)

router = APIRouter()
"""Every HTTP route of the application; mounted by `lexadvisor.main`."""

DONE_FRAME = "data: [DONE]\n\n"


# ----------------------------------------------------------------------
# dependencies
# ----------------------------------------------------------------------
def get_session_store(token: str = Cookie(None)) -> SessionStore:
    """Restore the caller's session from the `token` cookie, or answer 401."""
    if not token:
        raise HTTPException(status_code=401, detail="Missing Token")
    store = SessionStore()
    if not store.restore(token):
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return store


def get_completion_client() -> CompletionClient:
    return CompletionClient.from_settings()


def get_document_storage() -> DocumentStorage:
    return DocumentStorage()


def _open(view_cls, *args, **kwargs):
    try:
        return view_cls(*args, **kwargs)
    except AccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))


def _relay(notice: Notice | None) -> dict | None:
    """Raise a destructive notice as an HTTP error, pass the others through."""
    if notice is None:
        return None
    if not notice.ok:
        raise HTTPException(status_code=notice.status, detail=notice.description or notice.title)
    return notice.to_dict()


def _session_payload(store: SessionStore) -> dict:
    user = store.user
    return {
        "user": {"id": user.id, "email": user.email, "full_name": user.full_name} if user else None,
        "role": store.role,
        "role_badge": role_badge(store.role) if user else None,
        "navigation": [item.to_dict() for item in visible_nav_items(store.role)],
        "landing": landing_path(user is not None),
    }


def _frame(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


# ----------------------------------------------------------------------
# auth
# ----------------------------------------------------------------------
@router.post("/auth/signup")
def signup(data: UserData):
    """Register a new account. The caller is not signed in afterwards."""
    result = SessionStore().sign_up(data.email, data.password, data.full_name)
    if not result.ok:
        raise HTTPException(status_code=400, detail=result.error)
    return {"title": "Account created", "description": "You can now sign in with your credentials."}


@router.post("/auth/login")
def login(data: UserCredentials, response: Response):
    """Authenticate a user and set a signed JWT cookie.

    Response:
        200: session payload (user, role, navigation)
        401: HTTPException with error detail
    """
    store = SessionStore()
    result = store.sign_in(data.email, data.password)
    if not result.ok:
        raise HTTPException(status_code=401, detail=result.error)
    response.set_cookie(
        key="token",
        value=store.access_token,
        httponly=True,
        secure=False,  # True in production
        samesite="lax",
    )
    return _session_payload(store)


@router.post("/auth/logout")
def logout(response: Response, token: str = Cookie(None)):
    """End the session held in the `token` cookie and clear the cookie."""
    store = SessionStore()
    if token and store.restore(token):
        store.sign_out()
    response.delete_cookie(key="token")
    return True


@router.get("/auth/session")
def session(store: SessionStore = Depends(get_session_store)):
    return _session_payload(store)


@router.get("/navigation")
def navigation(store: SessionStore = Depends(get_session_store)):
    payload = _session_payload(store)
    return {"items": payload["navigation"], "role_badge": payload["role_badge"]}


# ----------------------------------------------------------------------
# conversations & chat
# ----------------------------------------------------------------------
@router.get("/conversations")
def list_conversations(
    store: SessionStore = Depends(get_session_store),
    client: CompletionClient = Depends(get_completion_client),
):
    """Own conversations (most recent first) plus the transcript of the first one."""
    view = _open(ChatView, store, client)
    _relay(view.load_conversations())
    return {
        "conversations": view.conversations,
        "active_conversation_id": view.active_conversation_id,
        "messages": view.messages,
        "suggested_prompts": list(view.suggested_prompts),
    }


@router.post("/conversations")
def new_conversation(
    store: SessionStore = Depends(get_session_store),
    client: CompletionClient = Depends(get_completion_client),
):
    view = _open(ChatView, store, client)
    _relay(view.create_conversation())
    return view.conversations[0]


@router.delete("/conversations/{conversation_id}")
def delete_conversation(
    conversation_id: str,
    store: SessionStore = Depends(get_session_store),
    client: CompletionClient = Depends(get_completion_client),
):
    view = _open(ChatView, store, client)
    _relay(view.load_conversations())
    notice = _relay(view.delete_conversation(conversation_id))
    return {**notice, "active_conversation_id": view.active_conversation_id}


@router.get("/conversations/{conversation_id}/messages")
def conversation_messages(
    conversation_id: str,
    store: SessionStore = Depends(get_session_store),
    client: CompletionClient = Depends(get_completion_client),
):
    view = _open(ChatView, store, client)
    _relay(view.select_conversation(conversation_id))
    return view.messages


@router.post("/chat")
async def chat(
    data: ChatRequest,
    store: SessionStore = Depends(get_session_store),
    client: CompletionClient = Depends(get_completion_client),
):
    """Send a message and stream the assistant reply as SSE.

    Behavior:
        - Without `conversation_id` a conversation titled from the message is created.
        - Completion failures raised before the first frame map to 429 / 402 / 502.
        - Failures after streaming started are sent as a final
          `{"error": ..., "status": ...}` frame before `[DONE]`.
    """
    view = _open(ChatView, store, client)
    if data.conversation_id:
        _relay(view.select_conversation(data.conversation_id))
        _relay(view.load_conversations())
        if not any(c["id"] == data.conversation_id for c in view.conversations):
            raise HTTPException(status_code=404, detail="Conversation not found")

    stream = view.stream_message(data.content)
    try:
        first = await anext(stream)
    except StopAsyncIteration:
        first = None
    except NoticeError as e:
        raise HTTPException(status_code=e.notice.status, detail=e.notice.description)
    except CompletionError as e:
        logger.error(f"Completion failed before streaming: {e}")
        raise HTTPException(status_code=e.status_code, detail=e.user_message)

    async def generate():
        try:
            if first is not None:
                yield _frame({"response": first, "conversation_id": view.active_conversation_id, "status": 200})
            async for snapshot in stream:
                yield _frame({"response": snapshot, "conversation_id": view.active_conversation_id, "status": 200})
        except CompletionError as e:
            logger.error(f"Completion failed while streaming: {e}")
            yield _frame({"error": e.user_message, "status": e.status_code})
        finally:
            view.close()
            await stream.aclose()
        yield DONE_FRAME

    return StreamingResponse(generate(), media_type="text/event-stream")


# ----------------------------------------------------------------------
# documents
# ----------------------------------------------------------------------
@router.get("/documents")
def list_documents(
    search: str = "",
    domain: str = ALL_DOMAINS,
    store: SessionStore = Depends(get_session_store),
    storage: DocumentStorage = Depends(get_document_storage),
):
    view = _open(DocumentsView, store, storage)
    _relay(view.load())
    return {"documents": view.filtered_documents(search, domain), "domains": view.domain_labels}


@router.post("/documents")
def upload_document(
    title: str = Form(...),
    content: str = Form(...),
    description: Optional[str] = Form(None),
    domain: str = Form("general"),
    jurisdiction: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    store: SessionStore = Depends(get_session_store),
    storage: DocumentStorage = Depends(get_document_storage),
):
    """Upload a document (multipart/form-data, optional `file`)."""
    view = _open(DocumentsView, store, storage)
    attachment = None
    if file is not None and file.filename:
        attachment = (file.filename, file.file.read(), file.content_type)
    notice = _relay(
        view.upload(
            title=title,
            content=content,
            description=description,
            domain=domain,
            jurisdiction=jurisdiction,
            year=year,
            tags=tags,
            file=attachment,
        )
    )
    return {**notice, "document": view.documents[0]}


@router.post("/documents/{document_id}/validate")
def validate_document(
    document_id: str,
    store: SessionStore = Depends(get_session_store),
    storage: DocumentStorage = Depends(get_document_storage),
):
    view = _open(DocumentsView, store, storage)
    return _relay(view.validate(document_id))


@router.delete("/documents/{document_id}")
def delete_document(
    document_id: str,
    store: SessionStore = Depends(get_session_store),
    storage: DocumentStorage = Depends(get_document_storage),
):
    view = _open(DocumentsView, store, storage)
    return _relay(view.delete(document_id))


@router.get("/documents/{document_id}/download")
def download_document(
    document_id: str,
    store: SessionStore = Depends(get_session_store),
    storage: DocumentStorage = Depends(get_document_storage),
):
    view = _open(DocumentsView, store, storage)
    try:
        return {"url": view.download_url(document_id)}
    except NoticeError as e:
        _relay(e.notice)


# ----------------------------------------------------------------------
# users & logs
# ----------------------------------------------------------------------
@router.get("/users")
def list_users(search: str = "", store: SessionStore = Depends(get_session_store)):
    view = _open(UsersView, store)
    _relay(view.load())
    return {"users": view.filtered_users(search), "stats": view.role_stats()}


@router.put("/users/{user_id}/role")
def change_role(user_id: str, data: RoleChange, store: SessionStore = Depends(get_session_store)):
    view = _open(UsersView, store)
    return _relay(view.change_role(user_id, data.role))


@router.get("/logs")
def list_logs(search: str = "", store: SessionStore = Depends(get_session_store)):
    view = _open(LogsView, store)
    _relay(view.load())
    return [{**entry, "tone": action_tone(entry["action"])} for entry in view.filtered_logs(search)]
