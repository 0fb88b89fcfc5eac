import uuid

import pytest
from sqlalchemy import func, select

from lexadvisor.database.entities import Message
from lexadvisor.database.gateway import DataGateway
from lexadvisor.database.helpers.transactionManagement import transactional
from lexadvisor.database.policies import INSERT, STORAGE_OBJECTS, PolicyEvaluator


@transactional
def count_messages(session=None) -> int:
    return session.scalar(select(func.count()).select_from(Message))


@pytest.fixture
def people(make_user):
    return {
        "u1": make_user("u1@lex.test"),
        "u2": make_user("u2@lex.test"),
        "analyst": make_user("analyst@lex.test", "legal_analyst"),
        "admin": make_user("admin@lex.test", "admin"),
    }


def insert_document(people, title="Lease Act", validated=False, uploaded_by="u1"):
    res = (
        DataGateway(people["admin"])
        .table("legal_documents")
        .insert(
            {"title": title, "content": "text", "domain": "property", "uploaded_by": people[uploaded_by], "validated": validated}
        )
        .single()
        .execute()
    )
    assert res.error is None, res.error
    return res.data


def titles(user_id) -> list[str]:
    res = DataGateway(user_id).table("legal_documents").select("title").execute()
    assert res.error is None
    return [row["title"] for row in res.data]


def test_unvalidated_document_visibility(people):
    insert_document(people, "Lease Act", validated=False, uploaded_by="u1")

    assert titles(people["u2"]) == []
    assert titles(people["u1"]) == ["Lease Act"]
    assert titles(people["analyst"]) == ["Lease Act"]
    assert titles(people["admin"]) == ["Lease Act"]


def test_validated_document_visible_to_every_user(people):
    insert_document(people, "Civil Code", validated=True, uploaded_by="admin")
    assert titles(people["u2"]) == ["Civil Code"]


def test_anonymous_sees_nothing(people):
    insert_document(people, "Civil Code", validated=True, uploaded_by="admin")
    assert DataGateway(None).table("legal_documents").select("*").execute().data == []


def test_plain_user_cannot_insert_documents(people):
    res = DataGateway(people["u1"]).table("legal_documents").insert({"title": "X", "content": "y"}).execute()
    assert res.data is None
    assert res.error.code == "42501"
    assert res.error.message == 'new row violates row-level security policy for table "legal_documents"'


def test_inserted_row_is_returned_serialized(people):
    doc = insert_document(people, "Tax Code", validated=True, uploaded_by="admin")
    uuid.UUID(doc["id"])
    assert doc["uploaded_by"] == people["admin"]
    assert doc["domain"] == "property"
    assert doc["validated"] is True
    assert isinstance(doc["created_at"], str)


def test_document_domain_defaults_to_general(people):
    res = (
        DataGateway(people["analyst"])
        .table("legal_documents")
        .insert({"title": "Civil Code", "content": "text", "uploaded_by": people["analyst"]})
        .single()
        .execute()
    )
    assert res.error is None, res.error
    assert res.data["domain"] == "general"


def test_conversation_insert_for_someone_else_is_rejected(people):
    res = DataGateway(people["u1"]).table("conversations").insert({"user_id": people["u2"], "title": "t"}).execute()
    assert res.error.code == "42501"


def test_update_of_invisible_rows_affects_nothing(people):
    conv = DataGateway(people["u1"]).table("conversations").insert({"user_id": people["u1"], "title": "Mine"}).single().execute().data

    res = DataGateway(people["u2"]).table("conversations").update({"title": "Stolen"}).eq("id", conv["id"]).execute()
    assert res.error is None
    assert res.data == []

    again = DataGateway(people["u1"]).table("conversations").select("title").eq("id", conv["id"]).single().execute()
    assert again.data == {"title": "Mine"}


def test_update_cannot_move_a_row_to_another_owner(people):
    gateway = DataGateway(people["u1"])
    conv = gateway.table("conversations").insert({"user_id": people["u1"], "title": "Mine"}).single().execute().data
    res = gateway.table("conversations").update({"user_id": people["u2"]}).eq("id", conv["id"]).execute()
    assert res.error.code == "42501"


def test_messages_follow_conversation_ownership(people):
    owner = DataGateway(people["u1"])
    conv = owner.table("conversations").insert({"user_id": people["u1"], "title": "t"}).single().execute().data
    assert owner.table("messages").insert({"conversation_id": conv["id"], "role": "user", "content": "hi"}).execute().error is None

    intruder = DataGateway(people["u2"])
    assert intruder.table("messages").select("*").eq("conversation_id", conv["id"]).execute().data == []
    res = intruder.table("messages").insert({"conversation_id": conv["id"], "role": "user", "content": "x"}).execute()
    assert res.error.code == "42501"


def test_deleting_a_conversation_removes_its_messages(people):
    gateway = DataGateway(people["u1"])
    conv = gateway.table("conversations").insert({"user_id": people["u1"], "title": "t"}).single().execute().data
    for content in ("one", "two"):
        gateway.table("messages").insert({"conversation_id": conv["id"], "role": "user", "content": content}).execute()
    assert count_messages() == 2

    deleted = gateway.table("conversations").delete().eq("id", conv["id"]).execute()
    assert [row["id"] for row in deleted.data] == [conv["id"]]
    assert count_messages() == 0


def test_message_role_check_constraint(people):
    gateway = DataGateway(people["u1"])
    conv = gateway.table("conversations").insert({"user_id": people["u1"], "title": "t"}).single().execute().data
    res = gateway.table("messages").insert({"conversation_id": conv["id"], "role": "robot", "content": "x"}).execute()
    assert res.error.code == "23514"


def test_duplicate_role_is_a_unique_violation(people):
    res = DataGateway(people["admin"]).table("user_roles").insert({"user_id": people["u1"], "role": "user"}).execute()
    assert res.error.code == "23505"


def test_unknown_enum_value(people):
    res = DataGateway(people["admin"]).table("user_roles").insert({"user_id": people["u1"], "role": "owner"}).execute()
    assert res.error.code == "22P02"
    assert res.error.message == 'invalid input value for enum app_role: "owner"'


def test_malformed_uuid_filter(people):
    res = DataGateway(people["u1"]).table("conversations").select("*").eq("id", "not-a-uuid").execute()
    assert res.error.code == "22P02"


def test_unknown_table_and_column(people):
    gateway = DataGateway(people["admin"])
    assert gateway.table("invoices").select("*").execute().error.code == "42P01"
    assert gateway.table("profiles").select("nickname").execute().error.code == "42703"
    assert gateway.table("profiles").select("*").eq("nickname", "x").execute().error.code == "42703"


def test_single_requires_exactly_one_row(people):
    gateway = DataGateway(people["u1"])
    assert gateway.table("conversations").select("*").single().execute().error.code == "PGRST116"

    for title in ("a", "b"):
        gateway.table("conversations").insert({"user_id": people["u1"], "title": title}).execute()
    assert gateway.table("conversations").select("*").single().execute().error.code == "PGRST116"


def test_order_limit_and_count(people):
    gateway = DataGateway(people["u1"])
    for title in ("b", "c", "a"):
        gateway.table("conversations").insert({"user_id": people["u1"], "title": title}).execute()

    res = gateway.table("conversations").select("title", count="exact").order("title").limit(2).execute()
    assert [row["title"] for row in res.data] == ["a", "b"]
    assert res.count == 3


def test_system_logs_are_written_by_anyone_and_read_by_admins(people):
    own = DataGateway(people["u1"]).table("system_logs").insert({"user_id": people["u1"], "action": "login", "details": {"ok": True}}).execute()
    assert own.error is None

    forged = DataGateway(people["u1"]).table("system_logs").insert({"user_id": people["u2"], "action": "login"}).execute()
    assert forged.error.code == "42501"

    assert DataGateway(people["u1"]).table("system_logs").select("*").execute().data == []
    entries = DataGateway(people["admin"]).table("system_logs").select("*").execute().data
    assert [(e["action"], e["details"]) for e in entries] == [("login", {"ok": True})]


def test_profiles_and_roles_visibility(people):
    assert len(DataGateway(people["u1"]).table("profiles").select("*").execute().data) == 1
    assert len(DataGateway(people["admin"]).table("profiles").select("*").execute().data) == 4
    roles = DataGateway(people["u1"]).table("user_roles").select("role").execute().data
    assert roles == [{"role": "user"}]


def test_storage_policies(people):
    evaluator = PolicyEvaluator()
    user = evaluator.caller(people["u1"])
    analyst = evaluator.caller(people["analyst"])

    assert evaluator.allows(user, STORAGE_OBJECTS, "select")
    assert not evaluator.allows(user, STORAGE_OBJECTS, INSERT)
    assert evaluator.allows(analyst, STORAGE_OBJECTS, INSERT)
    assert not evaluator.allows(analyst, STORAGE_OBJECTS, "delete")
    assert not evaluator.allows(evaluator.caller(None), STORAGE_OBJECTS, "select")


def test_caller_with_malformed_id_is_anonymous():
    assert not PolicyEvaluator().caller("garbage").authenticated


def test_document_delete_cascades_to_embeddings(people):
    doc = insert_document(people, validated=True, uploaded_by="admin")
    analyst = DataGateway(people["analyst"])
    res = analyst.table("document_embeddings").insert(
        {"document_id": doc["id"], "chunk_index": 0, "chunk_text": "Section 1", "embedding": [0.1, 0.2]}
    ).execute()
    assert res.error is None
    assert len(DataGateway(people["u2"]).table("document_embeddings").select("id").execute().data) == 1

    assert DataGateway(people["analyst"]).table("legal_documents").delete().eq("id", doc["id"]).execute().data == []
    DataGateway(people["admin"]).table("legal_documents").delete().eq("id", doc["id"]).execute()
    assert analyst.table("document_embeddings").select("id").execute().data == []
