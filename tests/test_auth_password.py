def register(client, email="pw@example.com", password="secret1", first_name="Pw", last_name="User"):
    return client.post(
        "/api/users/register",
        json={"email": email, "password": password, "firstName": first_name, "lastName": last_name},
    )


def test_register_and_login_flow(client):
    r = register(client)
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["user"]["email"] == "pw@example.com"
    assert data["user"]["firstName"] == "Pw"
    assert data["token"]

    # login with wrong password
    r2 = client.post("/api/users/auth", json={"email": "pw@example.com", "password": "wrong1"})
    assert r2.status_code == 401
    assert r2.json()["detail"] == "Invalid credentials"

    # login with correct password, any email casing
    r3 = client.post("/api/users/auth", json={"email": "PW@example.com", "password": "secret1"})
    assert r3.status_code == 200
    token = r3.json()["data"]["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["user"]["authProviders"] == ["email"]


def test_unknown_email_looks_like_wrong_password(client):
    register(client)
    r = client.post("/api/users/auth", json={"email": "nobody@example.com", "password": "secret1"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"


def test_duplicate_registration_is_rejected(client):
    assert register(client).status_code == 201
    r = register(client, email="Pw@Example.com")
    assert r.status_code == 400


def test_invalid_login_payload_is_rejected(client):
    r = client.post("/api/users/auth", json={"email": "not-an-email", "password": "secret1"})
    assert r.status_code == 400
    r = client.post("/api/users/auth", json={"email": "pw@example.com", "password": "123"})
    assert r.status_code == 400
    r = client.post("/api/users/auth", json={})
    assert r.status_code == 400
