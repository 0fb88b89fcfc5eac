from lexadvisor.database.core.funcs import authenticate_user, fetch_user_details, register_user
from lexadvisor.database.policies import PolicyEvaluator

from tests.conftest import PASSWORD, set_roles


def test_register_runs_new_user_trigger():
    res = register_user(email="  Jo@Lex.Test ", password=PASSWORD, full_name="Jo")
    assert res["res"]
    details = fetch_user_details(res["user_id"])
    assert details == {"id": res["user_id"], "email": "jo@lex.test", "full_name": "Jo"}
    assert PolicyEvaluator().caller(res["user_id"]).roles == frozenset({"user"})


def test_register_rejects_bad_email():
    res = register_user(email="jo@", password=PASSWORD)
    assert res == {"res": False, "detail": "Unable to validate email address: invalid format"}


def test_authenticate_user(make_user):
    user_id = make_user("jo@lex.test", full_name="Jo")
    ok = authenticate_user(email="JO@lex.test", password=PASSWORD)
    assert ok["authenticated"]
    assert ok["user_details"]["id"] == user_id

    bad = authenticate_user(email="jo@lex.test", password="wrong-one")
    assert bad == {"authenticated": False, "detail": "Invalid login credentials", "user_details": None}


def test_caller_carries_every_role_row(make_user):
    user_id = make_user("jo@lex.test")
    set_roles(user_id, "user", "admin")
    caller = PolicyEvaluator().caller(user_id)
    assert caller.roles == frozenset({"user", "admin"})
    assert caller.has_role("legal_analyst", "admin")
    assert not caller.has_role("legal_analyst")


def test_caller_for_malformed_id_is_anonymous():
    assert not PolicyEvaluator().caller("garbage").authenticated


def test_fetch_unknown_user():
    assert fetch_user_details("00000000-0000-0000-0000-000000000000") is None
    assert fetch_user_details("garbage") is None
