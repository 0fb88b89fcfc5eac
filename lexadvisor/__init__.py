"""
LexAdvisor - legal-assistance chat backend.

Packages
--------
- api        HTTP router, completion stream client and parser, S3 storage
- auth       authentication provider and session store
- crypt      password hashing
- database   settings, engine, entities, DAOs, row policies, data gateway
- views      server-side state and actions of each screen
"""
