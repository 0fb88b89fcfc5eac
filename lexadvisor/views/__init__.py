"""
View layer: the server-side state and actions behind each screen of the
single-page frontend.

Every view is built per request around a `SessionStore` and talks to the
database only through the store's data gateway, so the row policies decide
what it can read or change. Actions answer with a `Notice` (the toast shown
to the user) and leave the previous state untouched when they fail.

Contents
--------
- notices      Notice / NoticeError
- navigation   role-filtered navigation shell, role badge, access guard
- audit        AuditLogger appending `system_logs` entries
- chat_view    conversations, transcript and streamed assistant replies
- documents_view  catalog, upload, validation, deletion, signed downloads
- users_view   user list, role statistics, role changes
- logs_view    audit-log viewer
"""
