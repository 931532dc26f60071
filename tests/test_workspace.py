"""
Tests for registration, sessions, channels, DMs and health probes.
"""
from conftest import auth, create_channel, create_dm, register


def my_handle(client, user) -> str:
    channel_id = create_channel(client, user, "Handles")
    details = client.get("/channel/details/v3", params={"channelId": channel_id}, headers=auth(user)).json()
    return next(m["handleStr"] for m in details["allMembers"] if m["uId"] == user["authUserId"])


class TestHealthEndpoints:

    def test_liveness(self, client):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_readiness(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["checks"]["database"] == "ok"
        assert data["checks"]["secret_key"] == "ok"
        assert data["checks"]["scheduler"] == "disabled"


class TestAuth:

    def test_register_and_login(self, client):
        user = register(client, "alice@example.com", "Alice", "Wong")
        assert isinstance(user["token"], str)

        response = client.post("/auth/login/v3", json={"email": "alice@example.com", "password": "password"})
        assert response.status_code == 200
        assert response.json()["authUserId"] == user["authUserId"]
        assert response.json()["token"] != user["token"]

    def test_register_invalid_email(self, client):
        response = client.post(
            "/auth/register/v3",
            json={"email": "not-an-email", "password": "password", "nameFirst": "A", "nameLast": "B"},
        )
        assert response.status_code == 400

    def test_register_duplicate_email(self, client, owner):
        response = client.post(
            "/auth/register/v3",
            json={"email": "johnsmith@example.com", "password": "password", "nameFirst": "A", "nameLast": "B"},
        )
        assert response.status_code == 400

    def test_register_short_password(self, client):
        response = client.post(
            "/auth/register/v3",
            json={"email": "a@example.com", "password": "12345", "nameFirst": "A", "nameLast": "B"},
        )
        assert response.status_code == 400

    def test_register_name_length(self, client):
        for first, last in (("", "B"), ("A" * 51, "B"), ("A", "")):
            response = client.post(
                "/auth/register/v3",
                json={"email": "a@example.com", "password": "password", "nameFirst": first, "nameLast": last},
            )
            assert response.status_code == 400

    def test_login_wrong_password(self, client, owner):
        response = client.post("/auth/login/v3", json={"email": "johnsmith@example.com", "password": "wrong!"})
        assert response.status_code == 400

    def test_login_unknown_email(self, client):
        response = client.post("/auth/login/v3", json={"email": "nobody@example.com", "password": "password"})
        assert response.status_code == 400

    def test_logout_invalidates_token(self, client, owner):
        response = client.post("/auth/logout/v2", headers=auth(owner))
        assert response.status_code == 200
        assert client.get("/channels/list/v3", headers=auth(owner)).status_code == 403

    def test_logout_keeps_other_sessions(self, client, owner):
        second = client.post(
            "/auth/login/v3",
            json={"email": "johnsmith@example.com", "password": "password"},
        ).json()
        client.post("/auth/logout/v2", headers=auth(owner))
        assert client.get("/channels/list/v3", headers=auth(second)).status_code == 200


class TestHandles:

    def test_collisions_get_numeric_suffix(self, client, owner, member, outsider):
        assert my_handle(client, owner) == "johnsmith"
        assert my_handle(client, member) == "johnsmith0"
        assert my_handle(client, outsider) == "johnsmith1"

    def test_non_alphanumeric_removed(self, client):
        user = register(client, "jp@example.com", "John-Paul", "O'Neil")
        assert my_handle(client, user) == "johnpauloneil"

    def test_long_names_truncated(self, client):
        first = register(client, "a@example.com", "Abcdefghijklmnop", "Qrstuvwxyz")
        second = register(client, "b@example.com", "Abcdefghijklmnop", "Qrstuvwxyz")
        assert my_handle(client, first) == "abcdefghijklmnopqrst"
        assert my_handle(client, second) == "abcdefghijklmnopqrst0"


class TestChannels:

    def test_create_and_list(self, client, owner, member):
        first = create_channel(client, owner, "General")
        second = create_channel(client, member, "Random")

        mine = client.get("/channels/list/v3", headers=auth(owner)).json()
        assert mine == {"channels": [{"channelId": first, "name": "General"}]}

        everything = client.get("/channels/listall/v3", headers=auth(owner)).json()
        assert [c["channelId"] for c in everything["channels"]] == [first, second]

    def test_create_name_too_long(self, client, owner):
        response = client.post("/channels/create/v3", json={"name": "a" * 21, "isPublic": True}, headers=auth(owner))
        assert response.status_code == 400

    def test_create_empty_name(self, client, owner):
        response = client.post("/channels/create/v3", json={"name": "", "isPublic": True}, headers=auth(owner))
        assert response.status_code == 400

    def test_details(self, client, owner, member):
        channel_id = create_channel(client, owner, "General")
        client.post("/channel/join/v3", json={"channelId": channel_id}, headers=auth(member))

        response = client.get("/channel/details/v3", params={"channelId": channel_id}, headers=auth(member))
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "General"
        assert data["isPublic"] is True
        assert [m["uId"] for m in data["ownerMembers"]] == [owner["authUserId"]]
        assert [m["uId"] for m in data["allMembers"]] == [owner["authUserId"], member["authUserId"]]
        assert data["ownerMembers"][0] == {
            "uId": owner["authUserId"],
            "email": "johnsmith@example.com",
            "nameFirst": "John",
            "nameLast": "Smith",
            "handleStr": "johnsmith",
        }

    def test_details_non_member(self, client, owner, member):
        channel_id = create_channel(client, owner)
        response = client.get("/channel/details/v3", params={"channelId": channel_id}, headers=auth(member))
        assert response.status_code == 403

    def test_details_invalid_channel(self, client, owner):
        response = client.get("/channel/details/v3", params={"channelId": 123}, headers=auth(owner))
        assert response.status_code == 400

    def test_join_twice(self, client, owner):
        channel_id = create_channel(client, owner)
        response = client.post("/channel/join/v3", json={"channelId": channel_id}, headers=auth(owner))
        assert response.status_code == 400

    def test_join_private(self, client, owner, member):
        channel_id = create_channel(client, owner, "Private", is_public=False)
        response = client.post("/channel/join/v3", json={"channelId": channel_id}, headers=auth(member))
        assert response.status_code == 403

    def test_global_owner_joins_private(self, client, owner, member):
        channel_id = create_channel(client, member, "Private", is_public=False)
        response = client.post("/channel/join/v3", json={"channelId": channel_id}, headers=auth(owner))
        assert response.status_code == 200

    def test_invite(self, client, owner, member):
        channel_id = create_channel(client, owner, "Private", is_public=False)
        response = client.post(
            "/channel/invite/v3",
            json={"channelId": channel_id, "uId": member["authUserId"]},
            headers=auth(owner),
        )
        assert response.status_code == 200
        assert client.get("/channels/list/v3", headers=auth(member)).json()["channels"][0]["channelId"] == channel_id

    def test_invite_invalid_user(self, client, owner):
        channel_id = create_channel(client, owner)
        response = client.post("/channel/invite/v3", json={"channelId": channel_id, "uId": 99}, headers=auth(owner))
        assert response.status_code == 400

    def test_invite_existing_member(self, client, owner):
        channel_id = create_channel(client, owner)
        response = client.post(
            "/channel/invite/v3",
            json={"channelId": channel_id, "uId": owner["authUserId"]},
            headers=auth(owner),
        )
        assert response.status_code == 400

    def test_invite_by_non_member(self, client, owner, member, outsider):
        channel_id = create_channel(client, owner)
        response = client.post(
            "/channel/invite/v3",
            json={"channelId": channel_id, "uId": outsider["authUserId"]},
            headers=auth(member),
        )
        assert response.status_code == 403

    def test_leave(self, client, owner, member):
        channel_id = create_channel(client, owner)
        client.post("/channel/join/v3", json={"channelId": channel_id}, headers=auth(member))

        response = client.post("/channel/leave/v2", json={"channelId": channel_id}, headers=auth(member))
        assert response.status_code == 200
        assert client.get("/channels/list/v3", headers=auth(member)).json()["channels"] == []

        again = client.post("/channel/leave/v2", json={"channelId": channel_id}, headers=auth(member))
        assert again.status_code == 403

    def test_add_and_remove_owner(self, client, owner, member):
        channel_id = create_channel(client, owner)
        client.post("/channel/join/v3", json={"channelId": channel_id}, headers=auth(member))
        body = {"channelId": channel_id, "uId": member["authUserId"]}

        assert client.post("/channel/addowner/v2", json=body, headers=auth(owner)).status_code == 200
        assert client.post("/channel/addowner/v2", json=body, headers=auth(owner)).status_code == 400
        owners = client.get("/channel/details/v3", params={"channelId": channel_id}, headers=auth(owner)).json()
        assert len(owners["ownerMembers"]) == 2

        assert client.post("/channel/removeowner/v2", json=body, headers=auth(owner)).status_code == 200
        assert client.post("/channel/removeowner/v2", json=body, headers=auth(owner)).status_code == 400

    def test_add_owner_without_permission(self, client, owner, member, outsider):
        channel_id = create_channel(client, owner)
        client.post("/channel/join/v3", json={"channelId": channel_id}, headers=auth(member))
        client.post("/channel/join/v3", json={"channelId": channel_id}, headers=auth(outsider))

        response = client.post(
            "/channel/addowner/v2",
            json={"channelId": channel_id, "uId": outsider["authUserId"]},
            headers=auth(member),
        )
        assert response.status_code == 403

    def test_add_owner_non_member(self, client, owner, member):
        channel_id = create_channel(client, owner)
        response = client.post(
            "/channel/addowner/v2",
            json={"channelId": channel_id, "uId": member["authUserId"]},
            headers=auth(owner),
        )
        assert response.status_code == 400

    def test_remove_only_owner(self, client, owner):
        channel_id = create_channel(client, owner)
        response = client.post(
            "/channel/removeowner/v2",
            json={"channelId": channel_id, "uId": owner["authUserId"]},
            headers=auth(owner),
        )
        assert response.status_code == 400


class TestDms:

    def test_create_list_details(self, client, owner, member, outsider):
        dm_id = create_dm(client, member, [owner["authUserId"], outsider["authUserId"]])

        listed = client.get("/dm/list/v2", headers=auth(outsider)).json()
        assert listed == {"dms": [{"dmId": dm_id, "name": "johnsmith, johnsmith0, johnsmith1"}]}

        details = client.get("/dm/details/v2", params={"dmId": dm_id}, headers=auth(owner)).json()
        assert details["name"] == "johnsmith, johnsmith0, johnsmith1"
        assert sorted(m["uId"] for m in details["members"]) == sorted(
            [owner["authUserId"], member["authUserId"], outsider["authUserId"]]
        )

    def test_create_with_no_invitees(self, client, owner):
        dm_id = create_dm(client, owner, [])
        details = client.get("/dm/details/v2", params={"dmId": dm_id}, headers=auth(owner)).json()
        assert details["name"] == "johnsmith"

    def test_create_with_self(self, client, owner):
        response = client.post("/dm/create/v2", json={"uIds": [owner["authUserId"]]}, headers=auth(owner))
        assert response.status_code == 400

    def test_create_with_duplicates(self, client, owner, member):
        uid = member["authUserId"]
        response = client.post("/dm/create/v2", json={"uIds": [uid, uid]}, headers=auth(owner))
        assert response.status_code == 400

    def test_create_with_invalid_user(self, client, owner):
        response = client.post("/dm/create/v2", json={"uIds": [77]}, headers=auth(owner))
        assert response.status_code == 400

    def test_details_non_member(self, client, owner, member, outsider):
        dm_id = create_dm(client, owner, [member["authUserId"]])
        response = client.get("/dm/details/v2", params={"dmId": dm_id}, headers=auth(outsider))
        assert response.status_code == 403

    def test_leave_keeps_name(self, client, owner, member):
        dm_id = create_dm(client, owner, [member["authUserId"]])
        response = client.post("/dm/leave/v2", json={"dmId": dm_id}, headers=auth(member))
        assert response.status_code == 200

        assert client.get("/dm/list/v2", headers=auth(member)).json()["dms"] == []
        details = client.get("/dm/details/v2", params={"dmId": dm_id}, headers=auth(owner)).json()
        assert details["name"] == "johnsmith, johnsmith0"
        assert [m["uId"] for m in details["members"]] == [owner["authUserId"]]

    def test_remove(self, client, owner, member):
        dm_id = create_dm(client, owner, [member["authUserId"]])
        client.post("/message/senddm/v2", json={"dmId": dm_id, "message": "hi"}, headers=auth(owner))

        response = client.delete("/dm/remove/v2", params={"dmId": dm_id}, headers=auth(owner))
        assert response.status_code == 200
        assert client.get("/dm/list/v2", headers=auth(member)).json()["dms"] == []
        assert client.get("/dm/details/v2", params={"dmId": dm_id}, headers=auth(owner)).status_code == 400

        # The added notification outlives the DM
        feed = client.get("/notifications/get/v1", headers=auth(member)).json()["notifications"]
        assert feed[0]["dmId"] == dm_id

    def test_remove_by_non_creator(self, client, owner, member):
        dm_id = create_dm(client, owner, [member["authUserId"]])
        response = client.delete("/dm/remove/v2", params={"dmId": dm_id}, headers=auth(member))
        assert response.status_code == 403
