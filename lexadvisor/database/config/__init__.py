"""
Settings and database bootstrap.

- config: the `settings` singleton (environment / `.env`).
- connection_engine: engine, `metadata` and the declarative base the
  entities register on.
"""
