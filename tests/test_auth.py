from buildmart.models.user import User
from tests.conftest import image_file, login, register, signup


def test_register_hashes_the_password(client, db):
    user_id = register(client, "alice", "secret123", fullName="Alice A")
    user = db.query(User).filter(User.id == user_id).first()

    assert user.full_name == "Alice A"
    assert user.hashed_password != "secret123"
    assert user.hashed_password.startswith("$argon2")


def test_register_with_profile_picture(client, storage):
    response = client.post(
        "/api/register",
        data={"username": "pic", "password": "secret123"},
        files={"profilePicture": image_file("me.png")},
    )
    assert response.status_code == 201
    me = login(client, "pic")
    assert storage.key_for(me["profilePictureUrl"]) in storage.objects


def test_usernames_are_unique(client):
    register(client, "alice")
    response = client.post("/api/register", data={"username": "alice", "password": "another1"})
    assert response.status_code == 400
    assert response.json()["message"] == "Username already exists"


def test_register_validation(client):
    assert client.post("/api/register", data={"username": "al", "password": "secret123"}).status_code == 400
    assert client.post("/api/register", data={"username": "alice", "password": "123"}).status_code == 400


def test_login_session_and_logout(client):
    assert client.get("/api/me").json() == {"authenticated": False, "user": None}

    register(client, "alice")
    bad = client.post("/api/login", json={"username": "alice", "password": "wrong-pass"})
    assert bad.status_code == 401
    assert client.get("/api/me").json()["authenticated"] is False

    login(client, "alice")
    me = client.get("/api/me").json()
    assert me["authenticated"] is True
    assert me["user"]["username"] == "alice"
    assert "hashedPassword" not in me["user"]

    client.post("/api/logout")
    assert client.get("/api/me").json()["authenticated"] is False


def test_profile_update_is_self_only(client):
    other_id = register(client, "bob")
    user_id = signup(client, "alice")

    updated = client.put(f"/api/users/{user_id}", data={"bio": "Quantity surveyor", "location": "Adama"})
    assert updated.status_code == 200
    assert updated.json()["bio"] == "Quantity surveyor"

    assert client.put(f"/api/users/{other_id}", data={"bio": "hacked"}).status_code == 403


def test_password_change(client):
    user_id = signup(client, "alice")
    client.put(f"/api/users/{user_id}", data={"password": "newsecret"})
    client.post("/api/logout")

    assert client.post("/api/login", json={"username": "alice", "password": "secret123"}).status_code == 401
    assert client.post("/api/login", json={"username": "alice", "password": "newsecret"}).status_code == 200
