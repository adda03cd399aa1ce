def register(client, **body):
    payload = {"username": "erin", "password": "secret123", "email": "erin@example.com"}
    payload.update(body)
    return client.post("/api/auth/register", json=payload)


def test_register_returns_token_and_user(client):
    resp = register(client, first_name="Erin")
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["token"]
    assert body["user"]["username"] == "erin"
    assert body["user"]["first_name"] == "Erin"
    assert "password_hash" not in body["user"]


def test_token_from_register_authenticates(client):
    token = register(client).get_json()["token"]
    resp = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["email"] == "erin@example.com"


def test_register_validation(client):
    assert register(client, username="").status_code == 400
    assert register(client, password="123").status_code == 400
    assert register(client, email="not-an-email").status_code == 400


def test_register_conflicts(client):
    assert register(client).status_code == 201
    assert register(client, email="other@example.com").status_code == 409
    assert register(client, username="erin2").status_code == 409


def test_login(client):
    register(client)
    ok = client.post("/api/auth/login", json={"username": "erin", "password": "secret123"})
    assert ok.status_code == 200
    assert ok.get_json()["token"]

    bad = client.post("/api/auth/login", json={"username": "erin", "password": "wrong-password"})
    assert bad.status_code == 401
    missing = client.post("/api/auth/login", json={"username": "erin"})
    assert missing.status_code == 400


def test_verify_token(client):
    token = register(client).get_json()["token"]
    ok = client.post("/api/auth/verify-token", json={"token": token})
    assert ok.status_code == 200
    assert ok.get_json()["valid"] is True

    bad = client.post("/api/auth/verify-token", json={"token": "garbage"})
    assert bad.status_code == 401
    assert bad.get_json()["valid"] is False


def test_update_password(client, auth_headers):
    wrong = client.put("/api/auth/update-password",
                       json={"currentPassword": "nope", "newPassword": "newsecret"}, headers=auth_headers)
    assert wrong.status_code == 401

    ok = client.put("/api/auth/update-password",
                    json={"currentPassword": "secret123", "newPassword": "newsecret"}, headers=auth_headers)
    assert ok.status_code == 200
    login = client.post("/api/auth/login", json={"username": "alice", "password": "newsecret"})
    assert login.status_code == 200


def test_update_profile(client, auth_headers, other_user_id):
    assert client.put("/api/auth/update-profile", json={}, headers=auth_headers).status_code == 400
    taken = client.put("/api/auth/update-profile", json={"username": "bob"}, headers=auth_headers)
    assert taken.status_code == 409

    resp = client.put("/api/auth/update-profile",
                      json={"first_name": "Alice", "email": "ALICE@Example.org"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["user"]["first_name"] == "Alice"
    assert resp.get_json()["user"]["email"] == "alice@example.org"


def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "OK"}
