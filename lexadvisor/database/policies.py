"""
Row Policies
============

Declarative, table-keyed authorization rules evaluated beneath the data
gateway. They play the part of database row-level security: every gateway
request is narrowed by the table's USING predicate, and every inserted or
updated row must pass the WITH CHECK rule.

Semantics
---------
- Policies are permissive: a table operation is allowed when any of its rules
  holds (``AnyOf``). An operation with no rule is denied.
- SELECT / UPDATE / DELETE never fail because of a policy; rows the caller may
  not touch are simply invisible.
- INSERT and the post-image of UPDATE are checked row by row; the gateway turns
  a failed check into error ``42501``.
- An UPDATE rule doubles as its own check rule, like a policy declared with
  USING only.
- Unauthenticated callers are denied everything.

The ``storage.objects`` entry governs the document bucket; it is consulted
advisorily by :mod:`lexadvisor.api.aws_bucket_funcs.funcs`.
"""

import logging
import uuid
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import Table, and_, false, or_, select, true
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from lexadvisor.database.config.connection_engine import metadata
from lexadvisor.database.entities.enums import AppRole, STAFF_ROLES
from lexadvisor.database.daos.user_role_dao import UserRoleDao
import lexadvisor.database.entities  # noqa: F401
from lexadvisor.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

SELECT = "select"
INSERT = "insert"
UPDATE = "update"
DELETE = "delete"

STORAGE_OBJECTS = "storage.objects"


@dataclass(frozen=True)
class Caller:
    """
    Identity a request is evaluated for.

    Attributes
    ----------
    user_id : UUID | None
        Authenticated user, None for anonymous callers.
    roles : frozenset[str]
        Every role row the user holds.
    """

    user_id: UUID | None
    roles: frozenset = field(default_factory=frozenset)

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None

    def has_role(self, *roles: str) -> bool:
        return any(role in self.roles for role in roles)


ANONYMOUS = Caller(user_id=None)


class Rule:
    """A single policy expression, usable both in SQL and on a Python row."""

    def predicate(self, caller: Caller, table: Table) -> ColumnElement:
        raise NotImplementedError

    def holds(self, caller: Caller, row: dict, session: Session) -> bool:
        raise NotImplementedError

    def possible(self, caller: Caller) -> bool:
        """Whether the rule can hold for *some* row."""
        raise NotImplementedError


class Authenticated(Rule):
    """``TO authenticated USING (true)``"""

    def predicate(self, caller, table):
        return true()

    def holds(self, caller, row, session):
        return True

    def possible(self, caller):
        return True


class HasRole(Rule):
    """``has_role(auth.uid(), <role>)`` for any of the listed roles."""

    def __init__(self, *roles: str):
        self.roles = roles

    def predicate(self, caller, table):
        return true() if caller.has_role(*self.roles) else false()

    def holds(self, caller, row, session):
        return caller.has_role(*self.roles)

    def possible(self, caller):
        return caller.has_role(*self.roles)


class Owns(Rule):
    """``auth.uid() = <column>``"""

    def __init__(self, column: str):
        self.column = column

    def predicate(self, caller, table):
        return table.c[self.column] == caller.user_id

    def holds(self, caller, row, session):
        return _same_id(row.get(self.column), caller.user_id)

    def possible(self, caller):
        return True


class ColumnIs(Rule):
    """``<column> = <value>``"""

    def __init__(self, column: str, value):
        self.column = column
        self.value = value

    def predicate(self, caller, table):
        return table.c[self.column] == self.value

    def holds(self, caller, row, session):
        return row.get(self.column) == self.value

    def possible(self, caller):
        return True


class ParentOwned(Rule):
    """``EXISTS (SELECT 1 FROM <parent> WHERE id = <fk> AND <owner> = auth.uid())``"""

    def __init__(self, column: str, parent: str, owner_column: str = "user_id"):
        self.column = column
        self.parent = parent
        self.owner_column = owner_column

    def predicate(self, caller, table):
        parent = metadata.tables[self.parent]
        owned = select(parent.c.id).where(parent.c[self.owner_column] == caller.user_id)
        return table.c[self.column].in_(owned)

    def holds(self, caller, row, session):
        key = row.get(self.column)
        if key is None:
            return False
        parent = metadata.tables[self.parent]
        stmt = select(parent.c.id).where(
            and_(parent.c.id == key, parent.c[self.owner_column] == caller.user_id)
        )
        return session.execute(stmt).first() is not None

    def possible(self, caller):
        return True


class AnyOf(Rule):
    """Permissive combination of several policies on the same command."""

    def __init__(self, *rules: Rule):
        self.rules = rules

    def predicate(self, caller, table):
        return or_(*(rule.predicate(caller, table) for rule in self.rules))

    def holds(self, caller, row, session):
        return any(rule.holds(caller, row, session) for rule in self.rules)

    def possible(self, caller):
        return any(rule.possible(caller) for rule in self.rules)


def _same_id(value, user_id) -> bool:
    if value is None or user_id is None:
        return False
    try:
        return uuid.UUID(str(value)) == user_id
    except ValueError:
        return False


ADMIN = AppRole.ADMIN.value
STAFF = tuple(sorted(STAFF_ROLES))

POLICIES: dict[str, dict[str, Rule]] = {
    "profiles": {
        SELECT: AnyOf(Owns("user_id"), HasRole(ADMIN)),
        INSERT: Owns("user_id"),
        UPDATE: Owns("user_id"),
    },
    "user_roles": {
        SELECT: AnyOf(Owns("user_id"), HasRole(ADMIN)),
        INSERT: HasRole(ADMIN),
        UPDATE: HasRole(ADMIN),
        DELETE: HasRole(ADMIN),
    },
    "legal_documents": {
        SELECT: AnyOf(ColumnIs("validated", True), Owns("uploaded_by"), HasRole(*STAFF)),
        INSERT: HasRole(*STAFF),
        UPDATE: HasRole(*STAFF),
        DELETE: HasRole(ADMIN),
    },
    "document_embeddings": {
        SELECT: AnyOf(Authenticated(), HasRole(*STAFF)),
        INSERT: HasRole(*STAFF),
        UPDATE: HasRole(*STAFF),
        DELETE: HasRole(*STAFF),
    },
    "conversations": {
        SELECT: Owns("user_id"),
        INSERT: Owns("user_id"),
        UPDATE: Owns("user_id"),
        DELETE: Owns("user_id"),
    },
    "messages": {
        SELECT: ParentOwned("conversation_id", "conversations"),
        INSERT: ParentOwned("conversation_id", "conversations"),
    },
    "system_logs": {
        SELECT: HasRole(ADMIN),
        INSERT: Owns("user_id"),
    },
    STORAGE_OBJECTS: {
        SELECT: Authenticated(),
        INSERT: HasRole(*STAFF),
        DELETE: HasRole(ADMIN),
    },
}
"""Policy set per table and command."""


class PolicyEvaluator:
    """
    Evaluates :data:`POLICIES` for a caller.

    Parameters
    ----------
    policies : dict, optional
        Alternative policy set, defaults to :data:`POLICIES`.
    """

    def __init__(self, policies: dict | None = None):
        self.policies = policies if policies is not None else POLICIES

    @transactional
    def caller(self, user_id, session: Session = None) -> Caller:
        """
        Resolve the caller for ``user_id`` by reading its role rows.

        The lookup is privileged: a caller must know its own roles before any
        policy can be applied.
        """
        if user_id is None:
            return ANONYMOUS
        try:
            key = user_id if isinstance(user_id, UUID) else uuid.UUID(str(user_id))
        except ValueError:
            logger.warning(f"Ignoring malformed caller id {user_id!r}")
            return ANONYMOUS
        roles = UserRoleDao().fetchRolesByUserId(session, key)
        return Caller(user_id=key, roles=frozenset(roles))

    def _rule(self, table_name: str, operation: str) -> Rule | None:
        return self.policies.get(table_name, {}).get(operation)

    def using(self, caller: Caller, table: Table, operation: str) -> ColumnElement:
        """SQL predicate restricting which rows ``operation`` may see or touch."""
        rule = self._rule(table.name, operation)
        if rule is None or not caller.authenticated:
            return false()
        return rule.predicate(caller, table)

    def check(self, caller: Caller, table: Table, row: dict, session: Session, operation: str = INSERT) -> bool:
        """
        WITH CHECK evaluation for a new row (insert) or a post-image (update).

        Parameters
        ----------
        caller : Caller
        table : Table
        row : dict
            Column name to (coerced) value.
        session : Session
            Session of the running request, for rules that look at other tables.
        operation : str
            ``insert`` or ``update``.
        """
        rule = self._rule(table.name, operation)
        if rule is None or not caller.authenticated:
            return False
        return rule.holds(caller, row, session)

    def allows(self, caller: Caller, table_name: str, operation: str) -> bool:
        """
        Advisory answer: can ``caller`` perform ``operation`` on at least some
        rows of ``table_name``? Views and the storage layer use it to refuse
        early; the gateway never relies on it.
        """
        rule = self._rule(table_name, operation)
        if rule is None or not caller.authenticated:
            return False
        return rule.possible(caller)
