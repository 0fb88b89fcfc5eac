"""
DAOs Package - Privileged Data Access (SQLAlchemy 2.0)
======================================================

The `daos` package encapsulates the direct ORM access the authentication
provider and the policy evaluator need. Unlike the data gateway, DAOs are NOT
scoped by the row policies: they act with the authority of the auth service
itself (account creation, credential lookup, the new-user trigger, resolving
a caller's roles). Views never import them.

Conventions
-----------
- Session lifecycle (open/commit/rollback) is handled by callers
  (`@transactional` service functions)
- DAOs log and re-raise so upper layers decide error policy

Contents
--------
- AuthUserDao
    * Creates auth users with password hashing
    * Fetches auth users by email or id
    * Stamps the last sign-in time

- ProfileDao
    * Creates the profile row of a new user
    * Fetches a profile by user id

- UserRoleDao
    * Grants a role
    * Fetches all role names held by a user
"""
