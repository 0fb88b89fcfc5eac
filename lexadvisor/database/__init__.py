"""
The `database` package is responsible for all interactions with the application's database.
It provides configuration, entity definitions, privileged CRUD operations, the
policy-scoped data gateway and the authorization policies beneath it.

Contents:
    - config:
        Settings and the SQLAlchemy engine / declarative base.

    - entities:
        SQLAlchemy entity models representing the database tables and schemas.

    - daos:
        Data Access Objects used by the authentication provider. They bypass
        the row policies and are never reachable from the views.

    - core:
        Service functions for sign-up (including the new-user trigger),
        sign-in and role lookup.

    - helpers:
        `@transactional` session management.

    - policies:
        Declarative per-table authorization policies and their evaluator.

    - gateway:
        The data-access gateway every view talks to.
"""
