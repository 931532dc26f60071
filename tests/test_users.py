"""
Tests for the user directory and profile editing.
"""
from conftest import auth, create_channel, notifications, register, send


def profile(client, user, u_id):
    return client.get("/user/profile/v3", params={"uId": u_id}, headers=auth(user))


def set_handle(client, user, handle):
    return client.put("/user/profile/sethandle/v2", json={"handleStr": handle}, headers=auth(user))


class TestUserDirectory:

    def test_all_users(self, client, owner, member):
        response = client.get("/users/all/v2", headers=auth(owner))
        assert response.status_code == 200
        assert [u["handleStr"] for u in response.json()["users"]] == ["johnsmith", "johnsmith0"]

    def test_profile(self, client, owner, member):
        response = profile(client, owner, member["authUserId"])
        assert response.status_code == 200
        assert response.json() == {
            "user": {
                "uId": member["authUserId"],
                "email": "johndoe@example.com",
                "nameFirst": "John",
                "nameLast": "Smith",
                "handleStr": "johnsmith0",
            }
        }

    def test_profile_invalid_user(self, client, owner):
        assert profile(client, owner, 999).status_code == 400

    def test_invalid_token(self, client, owner):
        response = client.get("/users/all/v2", headers={"token": "not-a-session"})
        assert response.status_code == 403


class TestSetHandle:

    def test_set_handle(self, client, owner):
        assert set_handle(client, owner, "captain").status_code == 200
        assert profile(client, owner, owner["authUserId"]).json()["user"]["handleStr"] == "captain"

    def test_invalid_handles(self, client, owner):
        for handle in ("ab", "a" * 21, "has space", "dash-ed", ""):
            assert set_handle(client, owner, handle).status_code == 400

    def test_boundary_lengths(self, client, owner):
        assert set_handle(client, owner, "abc").status_code == 200
        assert set_handle(client, owner, "a" * 20).status_code == 200

    def test_handle_taken(self, client, owner, member):
        assert set_handle(client, member, "johnsmith").status_code == 400

    def test_handle_unchanged(self, client, owner):
        assert set_handle(client, owner, "johnsmith").status_code == 400

    def test_mentions_follow_new_handle(self, client, owner, member):
        channel_id = create_channel(client, owner)
        client.post("/channel/join/v3", json={"channelId": channel_id}, headers=auth(member))
        assert set_handle(client, member, "reviewer").status_code == 200

        send(client, owner, channel_id, "@johnsmith0 old")
        assert notifications(client, member) == []

        send(client, owner, channel_id, "@reviewer new")
        assert [n["notificationMessage"] for n in notifications(client, member)] == [
            "johnsmith tagged you in First: @reviewer new"
        ]

    def test_freed_handle_is_reusable(self, client, owner, member):
        assert set_handle(client, owner, "captain").status_code == 200
        assert set_handle(client, member, "johnsmith").status_code == 200


class TestSetNameAndEmail:

    def test_set_name(self, client, owner):
        response = client.put(
            "/user/profile/setname/v2",
            json={"nameFirst": "Jo", "nameLast": "Smythe"},
            headers=auth(owner),
        )
        assert response.status_code == 200
        user = profile(client, owner, owner["authUserId"]).json()["user"]
        assert (user["nameFirst"], user["nameLast"]) == ("Jo", "Smythe")
        assert user["handleStr"] == "johnsmith"

    def test_invalid_names(self, client, owner):
        for first, last in (("", "Smith"), ("John", ""), ("a" * 51, "Smith")):
            response = client.put(
                "/user/profile/setname/v2",
                json={"nameFirst": first, "nameLast": last},
                headers=auth(owner),
            )
            assert response.status_code == 400

    def test_set_email(self, client, owner):
        response = client.put(
            "/user/profile/setemail/v2",
            json={"email": "captain@example.com"},
            headers=auth(owner),
        )
        assert response.status_code == 200
        assert profile(client, owner, owner["authUserId"]).json()["user"]["email"] == "captain@example.com"

        login = client.post("/auth/login/v3", json={"email": "captain@example.com", "password": "password"})
        assert login.status_code == 200

    def test_email_invalid_or_taken(self, client, owner, member):
        for email in ("not-an-email", "johndoe@example.com"):
            response = client.put("/user/profile/setemail/v2", json={"email": email}, headers=auth(owner))
            assert response.status_code == 400

    def test_new_user_after_email_change(self, client, owner):
        client.put("/user/profile/setemail/v2", json={"email": "captain@example.com"}, headers=auth(owner))
        assert register(client, "johnsmith@example.com")["authUserId"] != owner["authUserId"]
