import pytest

from app.core.errors import DuplicateEmailError, UserNotFoundError
from app.core.security import verify_password
from app.services import users


def test_current_user(client, auth_headers, user):
    response = client.get("/users/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["id"] == user.id
    assert response.json()["isActive"] is True


def test_get_missing_user(client, auth_headers):
    response = client.get("/users/missing", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["code"] == "USER_NOT_FOUND"


def test_update_user_rehashes_password(client, db, auth_headers, user):
    response = client.patch(
        f"/users/{user.id}", headers=auth_headers, json={"name": "Head Cashier", "password": "newpass1"}
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Head Cashier"
    db.refresh(user)
    assert verify_password("newpass1", user.password_hash)


def test_update_email_collision(db, user):
    other = users.create_user(db, email="other@example.com", password="pw123456")

    with pytest.raises(DuplicateEmailError):
        users.update_user(db, other.id, email="CASHIER@example.com")


def test_delete_user(client, db, auth_headers):
    doomed = users.create_user(db, email="leaving@example.com", password="pw123456")

    response = client.delete(f"/users/{doomed.id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["email"] == "leaving@example.com"
    db.expunge_all()
    with pytest.raises(UserNotFoundError):
        users.get_user(db, doomed.id)
