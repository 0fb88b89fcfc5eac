import pytest

from lexadvisor.api.errors import AccessDeniedError
from lexadvisor.auth.session_store import SessionStore
from lexadvisor.database.gateway import GatewayError, GatewayResponse, TableRequest
from lexadvisor.database.policies import INSERT, PolicyEvaluator
from lexadvisor.views.audit import AuditLogger
from lexadvisor.views.logs_view import LogsView, action_tone
from lexadvisor.views.users_view import UsersView

from tests.conftest import PASSWORD, set_roles


@pytest.fixture
def admin(signed_in):
    return signed_in("admin", email="admin@lex.test")


def test_only_admins_open_users_and_logs(signed_in):
    analyst = signed_in("legal_analyst")
    with pytest.raises(AccessDeniedError):
        UsersView(analyst)
    with pytest.raises(AccessDeniedError):
        LogsView(analyst)


def test_load_merges_profiles_with_highest_role(admin, make_user):
    plain = make_user("plain@lex.test", full_name="Plain Person")
    multi = make_user("multi@lex.test", full_name="Multi Role")
    set_roles(multi, "user", "legal_analyst")
    bare = make_user("bare@lex.test", full_name="No Role")
    set_roles(bare)

    view = UsersView(admin)
    assert view.load() is None
    roles = {u["id"]: u["role"] for u in view.users}
    assert roles[plain] == "user"
    assert roles[multi] == "legal_analyst"
    assert roles[bare] == "user"
    assert view.role_stats() == {"admin": 1, "legal_analyst": 1, "user": 2}
    assert [u["full_name"] for u in view.filtered_users("multi")] == ["Multi Role"]


def test_change_role_and_audit_trail(admin, make_user):
    target = make_user("t@lex.test")
    view = UsersView(admin)
    view.load()

    notice = view.change_role(target, "legal_analyst")
    assert notice.description == "User role has been changed to legal_analyst."

    store = SessionStore()
    store.sign_in("t@lex.test", PASSWORD)
    assert store.role == "legal_analyst"

    logs = LogsView(admin)
    logs.load()
    assert logs.logs[0]["action"] == "role_change"
    assert logs.logs[0]["details"] == {"user_id": target, "from": "user", "to": "legal_analyst"}


def test_change_role_rejections(admin, make_user):
    target = make_user("t@lex.test")
    view = UsersView(admin)

    own = view.change_role(admin.user.id, "user")
    assert own.title == "Cannot change own role"
    assert own.description == "You cannot change your own role."
    assert view.change_role(target, "superuser").variant == "destructive"
    assert admin.refresh_role() == "admin"


def test_logs_newest_first_and_search(admin):
    audit = AuditLogger(admin)
    audit.record("document_upload", {"title": "Lease Act"})
    audit.record("role_change", {"to": "admin"})

    view = LogsView(admin)
    view.load()
    assert [e["action"] for e in view.logs] == ["role_change", "document_upload"]
    assert [e["action"] for e in view.filtered_logs("lease")] == ["document_upload"]
    assert [e["action"] for e in view.filtered_logs("ROLE")] == ["role_change"]


def test_audit_record_requires_a_user():
    assert AuditLogger(SessionStore()).record("anything") is False


@pytest.mark.parametrize(
    "action, tone",
    [
        ("sync_error", "destructive"),
        ("upload_failed", "destructive"),
        ("conversation_create", "success"),
        ("document_upload", "success"),
        ("document_delete", "warning"),
        ("tag_removed", "warning"),
        ("role_change", "muted"),
    ],
)
def test_action_tone(action, tone):
    assert action_tone(action) == tone


def test_failed_role_insert_reports_the_removed_role(admin, make_user, monkeypatch):
    target = make_user("t@lex.test")
    view = UsersView(admin)
    view.load()

    execute = TableRequest.execute

    def failing_insert(self):
        if self._name == "user_roles" and self._operation == INSERT:
            return GatewayResponse(error=GatewayError(message="connection reset", code="08006"))
        return execute(self)

    monkeypatch.setattr(TableRequest, "execute", failing_insert)
    notice = view.change_role(target, "legal_analyst")
    monkeypatch.undo()

    assert not notice.ok
    assert notice.description == "connection reset. The previous role (user) was removed and the user now has no role."
    assert PolicyEvaluator().caller(target).roles == frozenset()
