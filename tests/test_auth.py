from datetime import timedelta

from pos_app.core.jwt import create_access_token
from pos_app.models.users import User
from pos_app.services.users import create_user

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


def test_login_returns_bearer_token(anon_client):
    response = anon_client.post(
        "/auth/login",
        data={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert response.json()["access_token"]


def test_login_rejects_bad_password(anon_client):
    response = anon_client.post(
        "/auth/login",
        data={"username": ADMIN_EMAIL, "password": "wrong"},
    )

    assert response.status_code == 401


def test_me_returns_seeded_admin(client):
    body = client.get("/auth/me").json()

    assert body["email"] == ADMIN_EMAIL
    assert body["role"] == "admin"


def test_expired_token_is_rejected(anon_client, db):
    user = create_user(db, "cashier@shop.com", "till-pass-1", name="Cashier")
    token = create_access_token(
        {"sub": str(user.id), "role": user.role}, expires_delta=timedelta(minutes=-1)
    )

    response = anon_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_for_staff_user(anon_client, db):
    create_user(db, "Cashier@Shop.com", "till-pass-1", name="Cashier")

    response = anon_client.post(
        "/auth/login",
        data={"username": "cashier@shop.com", "password": "till-pass-1"},
    )
    token = response.json()["access_token"]

    me = anon_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["role"] == "staff"


def test_logout_route_is_not_exposed(client):
    assert client.post("/auth/logout").status_code == 404


def test_token_rejected_after_role_change(anon_client, db):
    user = create_user(db, "cashier@shop.com", "till-pass-1", name="Cashier")
    token = create_access_token({"sub": str(user.id), "role": user.role})
    headers = {"Authorization": f"Bearer {token}"}

    assert anon_client.get("/auth/me", headers=headers).status_code == 200

    user.role = "admin"
    db.commit()

    assert anon_client.get("/auth/me", headers=headers).status_code == 401


def test_admin_seeded_on_startup(anon_client, db):
    admin = db.query(User).filter(User.email == ADMIN_EMAIL).one()

    assert admin.role == "admin"
