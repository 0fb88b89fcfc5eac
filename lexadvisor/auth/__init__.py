"""
Authentication: the identity provider and the per-client session store.

Contents
--------
- provider
    `AuthProvider` signs users up and in against `auth_users` (bcrypt
    passwords, python-jose access tokens) and resolves tokens back to
    identities.
- session_store
    `SessionStore` holds the signed-in identity, the resolved role and a
    loading flag, and notifies subscribers whenever they change.
"""
