import pytest
from sqlalchemy.exc import OperationalError

from conftest import assert_no_credentials, headers_for
from models.log import Log
from models.users import User
from utils.exceptions import AuthorizationError, ConflictError, NotFoundError
from utils.roles import set_user_role


def _roles(db_session):
    db_session.expire_all()
    return {u.teacher_id: u.role for u in db_session.query(User).all()}


def test_promote_teacher_to_hod(client, db_session, admin, teacher):
    response = client.put("/users/T001/role", json={"role": "hod"}, headers=headers_for(admin))

    assert response.status_code == 200
    assert response.json()["role"] == "hod"
    assert_no_credentials(response.json())
    assert _roles(db_session)["T001"] == "hod"


def test_demote_hod_to_teacher_has_no_cascade(client, db_session, admin, make_user):
    make_user("H001", role="hod")
    make_user("H002", role="hod")

    response = client.put("/users/H001/role", json={"role": "teacher"}, headers=headers_for(admin))

    assert response.status_code == 200
    roles = _roles(db_session)
    assert roles["H001"] == "teacher"
    assert roles["H002"] == "hod"


def test_promotion_to_admin_demotes_every_hod(client, db_session, admin, make_user):
    for teacher_id in ("H001", "H002", "H003"):
        make_user(teacher_id, role="hod")
    target = make_user("T050", role="teacher")
    assert sum(1 for r in _roles(db_session).values() if r == "hod") == 3

    response = client.put(f"/users/{target.teacher_id}/role", json={"role": "admin"}, headers=headers_for(admin))

    assert response.status_code == 200
    assert response.json()["role"] == "admin"
    roles = _roles(db_session)
    assert roles["T050"] == "admin"
    assert [tid for tid, role in roles.items() if role == "hod"] == []
    assert {roles[t] for t in ("H001", "H002", "H003")} == {"teacher"}


def test_promoting_a_hod_to_admin_demotes_the_others(client, db_session, admin, make_user):
    make_user("H001", role="hod")
    make_user("H002", role="hod")

    response = client.put("/users/H002/role", json={"role": "admin"}, headers=headers_for(admin))

    assert response.status_code == 200
    roles = _roles(db_session)
    assert roles["H002"] == "admin"
    assert roles["H001"] == "teacher"


def test_cascade_is_audited(client, db_session, admin, make_user):
    make_user("H001", role="hod")
    make_user("T050")

    client.put("/users/T050/role", json={"role": "admin"}, headers=headers_for(admin))

    db_session.expire_all()
    cascade = db_session.query(Log).filter(Log.action == "ROLE_CASCADE").one()
    assert cascade.meta == {"promoted": "T050", "demoted": ["H001"]}


def test_only_admin_changes_roles(client, hod, teacher, other_teacher):
    for caller in (hod, teacher):
        response = client.put("/users/T002/role", json={"role": "hod"}, headers=headers_for(caller))
        assert response.status_code == 403


def test_unknown_role_rejected(client, admin, teacher):
    response = client.put("/users/T001/role", json={"role": "student"}, headers=headers_for(admin))

    assert response.status_code == 400
    assert "role" in response.json()["fields"]


def test_unknown_user(client, admin):
    response = client.put("/users/T404/role", json={"role": "hod"}, headers=headers_for(admin))
    assert response.status_code == 404


def test_admin_role_cannot_be_changed(client, admin, make_user):
    make_user("A002", role="admin")

    response = client.put("/users/A002/role", json={"role": "teacher"}, headers=headers_for(admin))
    assert response.status_code == 409


def test_same_role_is_a_no_op(client, db_session, admin, teacher):
    response = client.put("/users/T001/role", json={"role": "teacher"}, headers=headers_for(admin))

    assert response.status_code == 200
    assert _roles(db_session)["T001"] == "teacher"


def test_set_user_role_service_errors(db_session, admin, teacher, make_user):
    make_user("A002", role="admin")

    with pytest.raises(AuthorizationError):
        set_user_role(db_session, "A002", "teacher", teacher)
    with pytest.raises(NotFoundError):
        set_user_role(db_session, "T404", "hod", admin)
    with pytest.raises(ConflictError):
        set_user_role(db_session, "A002", "hod", admin)


def test_failed_cascade_leaves_no_partial_demotion(db_session, admin, make_user, monkeypatch):
    make_user("H001", role="hod")
    make_user("H002", role="hod")
    make_user("T050")

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", failing_commit)
    with pytest.raises(OperationalError):
        set_user_role(db_session, "T050", "admin", admin)
    monkeypatch.undo()

    roles = _roles(db_session)
    assert roles["H001"] == "hod"
    assert roles["H002"] == "hod"
    assert roles["T050"] == "teacher"
