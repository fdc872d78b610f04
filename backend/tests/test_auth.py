from datetime import timedelta

from conftest import make_user
from schoolhub.core.security import create_access_token, get_password_hash
from schoolhub.models import UserRole


def test_login_and_me(client, db):
    make_user(db, email="admin@example.com", role=UserRole.admin, hashed_password=get_password_hash("password123"))

    response = client.post("/api/auth/login", json={"email": "Admin@Example.com", "password": "password123"})

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["role"] == "admin"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "admin@example.com"


def test_login_rejects_wrong_password(client, db):
    make_user(db, email="admin@example.com", role=UserRole.admin, hashed_password=get_password_hash("password123"))

    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "wrong-password"})
    assert response.status_code == 401


def test_inactive_user_is_refused(client, db):
    user = make_user(db, email="former@example.com", role=UserRole.admin)
    user.is_active = False
    db.commit()

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {create_access_token(user.id)}"})
    assert response.status_code == 403


def test_expired_or_garbage_tokens_are_unauthorized(client, db):
    user = make_user(db, email="admin@example.com", role=UserRole.admin)
    expired = create_access_token(user.id, expires_delta=timedelta(minutes=-5))

    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"}).status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"}).status_code == 401
    assert client.get("/api/auth/me").status_code == 401
