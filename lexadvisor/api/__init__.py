"""
API Package - FastAPI Router • Models • JWT Utils • Completion Stream • S3
=========================================================================

Mission
-------
This package defines the backend's HTTP interface and the outbound clients
behind it: FastAPI routing, JWT cookie auth, the streaming completion
client and its incremental parser, and the document bucket.

Contents
--------
- fast_api
    FastAPI router with endpoints for:
      • Auth: signup, login, logout, session
      • Conversations: list, create, delete; messages: list
      • Chat (/chat): relays the assistant reply as Server-Sent Events
      • Documents: list, upload, validate, delete, signed download
      • Users: list with role statistics, change role
      • Logs: audit-log entries

- models
    Pydantic request/response contracts.

- utils
    JWT helpers (`create_access_token`, `verify_token`).

- stream_parser
    Incremental parser turning completion-stream bytes into
    accumulated-text snapshots.

- completion_client
    httpx client for the completion endpoint: status classification,
    streaming, cancellation.

- errors
    Exception taxonomy (completion, storage, auth, access).

- aws_bucket_funcs
    S3 helpers and the policy-checked `DocumentStorage`.

Operational Notes
-----------------
- Streaming: chat replies are streamed as `data: {json}\\n\\n` frames, ending
  with `data: [DONE]`.
- Security: auth via HttpOnly `token` cookie (JWT). Data access is always
  scoped by the row policies of the signed-in user.
"""
