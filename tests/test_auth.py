from notes_api import services
from notes_api.security import create_refresh_token


def test_login_and_refresh(client):
    services.create_user("alice", "secret", ["Employee"])

    resp = client.post("/auth", json={"username": "alice", "password": "secret"})
    assert resp.status_code == 200
    data = resp.json()
    assert "access_token" in data and "refresh_token" in data

    headers = {"Authorization": f"Bearer {data['access_token']}"}
    assert client.get("/users", headers=headers).status_code == 200

    resp = client.post("/auth/refresh", json={"refresh_token": data["refresh_token"]})
    assert resp.status_code == 200
    assert "access_token" in resp.json()


def test_login_wrong_password(client):
    services.create_user("alice", "secret", ["Employee"])

    resp = client.post("/auth", json={"username": "alice", "password": "wrong"})
    assert resp.status_code == 401


def test_inactive_user_token_rejected(client, auth_headers):
    services.create_user("bob", "secret", ["Employee"])
    bob = next(u for u in services.list_users() if u["username"] == "bob")
    services.update_user(bob["id"], "bob", ["Employee"], False)

    resp = client.post("/auth/refresh", json={"refresh_token": create_refresh_token("bob", ["Employee"])})
    assert resp.status_code == 401


def test_refresh_token_cannot_access_users(client, auth_headers):
    token = create_refresh_token("admin", ["Admin"])
    resp = client.get("/users", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
