from conftest import DEFAULT_PASSWORD, assert_no_credentials, headers_for
from models.users import User


def _new_user_payload(**overrides):
    payload = {
        "teacherId": "T100",
        "name": "Asha Raman",
        "phone": "9876543210",
        "designation": "Assistant Professor",
        "password": "initial-pass",
    }
    payload.update(overrides)
    return payload


def test_admin_creates_teacher_by_default(client, admin):
    response = client.post("/users", json=_new_user_payload(), headers=headers_for(admin))

    assert response.status_code == 201
    data = response.json()
    assert data["teacherId"] == "T100"
    assert data["role"] == "teacher"
    assert_no_credentials(data)


def test_created_user_can_log_in(client, admin):
    client.post("/users", json=_new_user_payload(), headers=headers_for(admin))

    response = client.post("/auth/login", json={"teacherId": "T100", "password": "initial-pass"})
    assert response.status_code == 200


def test_admin_can_create_hod(client, admin):
    response = client.post("/users", json=_new_user_payload(role="hod"), headers=headers_for(admin))

    assert response.status_code == 201
    assert response.json()["role"] == "hod"


def test_users_cannot_be_created_as_admin(client, admin):
    response = client.post("/users", json=_new_user_payload(role="admin"), headers=headers_for(admin))

    assert response.status_code == 400
    assert "role" in response.json()["fields"]


def test_duplicate_teacher_id_conflicts(client, admin, teacher):
    response = client.post("/users", json=_new_user_payload(teacherId="T001"), headers=headers_for(admin))
    assert response.status_code == 409


def test_create_user_validates_fields(client, admin):
    response = client.post(
        "/users", json=_new_user_payload(name="Al", password="123"), headers=headers_for(admin)
    )

    assert response.status_code == 400
    fields = response.json()["fields"]
    assert set(fields) >= {"name", "password"}


def test_only_admin_creates_users(client, hod, teacher):
    for caller in (hod, teacher):
        response = client.post("/users", json=_new_user_payload(), headers=headers_for(caller))
        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden"}


def test_list_users_for_hod_and_admin(client, admin, hod, teacher):
    for caller in (admin, hod):
        response = client.get("/users", headers=headers_for(caller))
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert {u["teacherId"] for u in data["items"]} == {"A001", "H001", "T001"}
        assert_no_credentials(data)


def test_teacher_cannot_list_users(client, teacher):
    assert client.get("/users", headers=headers_for(teacher)).status_code == 403


def test_list_users_filters(client, admin, make_user):
    make_user("T010", name="Meera Iyer")
    make_user("T011", name="Ravi Kumar")
    make_user("H010", role="hod", name="Meena Das")

    by_name = client.get("/users", params={"q": "mee"}, headers=headers_for(admin)).json()
    assert {u["teacherId"] for u in by_name["items"]} == {"T010", "H010"}

    by_role = client.get("/users", params={"role": "hod"}, headers=headers_for(admin)).json()
    assert [u["teacherId"] for u in by_role["items"]] == ["H010"]


def test_get_me(client, teacher):
    response = client.get("/users/me", headers=headers_for(teacher))

    assert response.status_code == 200
    assert response.json()["teacherId"] == "T001"
    assert_no_credentials(response.json())


def test_update_me_changes_profile_fields_only(client, db_session, teacher):
    response = client.put(
        "/users/me",
        json={"name": "New Name", "designation": "Professor", "role": "admin", "teacherId": "X"},
        headers=headers_for(teacher),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "New Name"
    assert data["designation"] == "Professor"
    assert data["role"] == "teacher"
    assert data["teacherId"] == "T001"


def test_update_me_validates(client, teacher):
    response = client.put("/users/me", json={"phone": "123"}, headers=headers_for(teacher))

    assert response.status_code == 400
    assert "phone" in response.json()["fields"]


def test_change_password(client, teacher):
    response = client.put(
        "/users/me/password",
        json={"oldPassword": DEFAULT_PASSWORD, "newPassword": "brand-new-pass"},
        headers=headers_for(teacher),
    )
    assert response.status_code == 200
    assert response.json() == {"success": True}

    old_login = client.post("/auth/login", json={"teacherId": "T001", "password": DEFAULT_PASSWORD})
    new_login = client.post("/auth/login", json={"teacherId": "T001", "password": "brand-new-pass"})
    assert old_login.status_code == 401
    assert new_login.status_code == 200


def test_change_password_wrong_old_password(client, db_session, teacher):
    original_hash = teacher.password_hash
    response = client.put(
        "/users/me/password",
        json={"oldPassword": "not-my-password", "newPassword": "brand-new-pass"},
        headers=headers_for(teacher),
    )

    assert response.status_code == 401
    db_session.expire_all()
    assert db_session.query(User).filter(User.teacher_id == "T001").one().password_hash == original_hash
