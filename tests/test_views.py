# =============================================================================
# tests/test_views.py - JSON Endpoint Tests
# =============================================================================
# Exercises the URL routes end to end through the Django test client:
# - Identity header -> request.user mapping
# - Method checks and the shared error shape
# - Messaging, conversation, friends, follow and notification endpoints
#
# Run with: pytest tests/test_views.py -v
# =============================================================================

import pytest

from social.models import Notification

pytestmark = pytest.mark.django_db


def assert_error(response, status, code):
    body = response.json()
    assert response.status_code == status
    assert body["success"] is False
    assert body["code"] == code
    assert isinstance(body["error"], str) and body["error"]


# =============================================================================
# Boundary behaviour
# =============================================================================

class TestApiBoundary:

    def test_anonymous_request_needs_auth(self, api):
        response = api().post("/messages/send", {"receiverUsername": "bob", "content": "hi"})

        assert_error(response, 401, "AUTH_REQUIRED")

    def test_unknown_identity_is_sender_not_found(self, api):
        response = api(external_id="ext_nobody").post(
            "/messages/send", {"receiverUsername": "bob", "content": "hi"}
        )

        assert_error(response, 404, "SENDER_NOT_FOUND")

    def test_wrong_method(self, api, alice):
        response = api(alice).get("/messages/send")

        assert_error(response, 405, "METHOD_NOT_ALLOWED")

    def test_invalid_json(self, api, alice):
        response = api(alice).post("/messages/send", raw="{not json")

        assert_error(response, 400, "INVALID_JSON")

    def test_public_counters_need_no_identity(self, api, alice):
        response = api().get("/follow/alice/counters")

        assert response.status_code == 200
        assert response.json() == {"success": True, "followersCount": 0, "followingCount": 0}


# =============================================================================
# Messaging
# =============================================================================

class TestMessagingEndpoints:

    def test_send_between_mutuals(self, api, alice, bob, make_mutual):
        make_mutual(alice, bob)

        response = api(alice).post("/messages/send", {"receiverUsername": "bob", "content": "Game at 7?"})

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["message"]["content"] == "Game at 7?"
        assert body["message"]["sender"]["username"] == "alice"
        assert {p["username"] for p in body["conversation"]["participants"]} == {"alice", "bob"}
        assert Notification.objects.filter(user=bob).count() == 1

    def test_send_without_mutual_follow(self, api, alice, bob, follow):
        follow(alice, bob)

        response = api(alice).post("/messages/send", {"receiverUsername": "bob", "content": "hi"})

        assert_error(response, 403, "FORBIDDEN")

    def test_send_to_unknown_receiver(self, api, alice):
        response = api(alice).post("/messages/send", {"receiverUsername": "ghost", "content": "hi"})

        assert_error(response, 404, "RECEIVER_NOT_FOUND")

    def test_send_empty(self, api, alice, bob, make_mutual):
        make_mutual(alice, bob)

        response = api(alice).post("/messages/send", {"receiverUsername": "bob", "content": "  "})

        assert_error(response, 400, "EMPTY_CONTENT")

    def test_send_invalid_username(self, api, alice):
        response = api(alice).post("/messages/send", {"receiverUsername": "x", "content": "hi"})

        assert_error(response, 400, "INVALID_USERNAME")

    def test_conversation_list_and_history(self, api, alice, bob, make_mutual):
        make_mutual(alice, bob)
        for text in ("one", "two", "three"):
            api(alice).post("/messages/send", {"receiverUsername": "bob", "content": text})

        listing = api(bob).get("/messages/conversations").json()
        conversation = listing["conversations"][0]
        assert listing["total"] == 1
        assert listing["hasMore"] is False
        assert conversation["unreadCount"] == 3
        assert conversation["lastMessage"]["content"] == "three"

        first = api(bob).get(f"/messages/conversations/{conversation['id']}/messages", {"limit": 2}).json()
        assert [m["content"] for m in first["messages"]] == ["three", "two"]
        assert first["hasMore"] is True
        assert first["nextCursor"] == first["messages"][-1]["id"]

        second = api(bob).get(
            f"/messages/conversations/{conversation['id']}/messages",
            {"limit": 2, "cursor": first["nextCursor"]},
        ).json()
        assert [m["content"] for m in second["messages"]] == ["one"]
        assert second["hasMore"] is False
        assert second["nextCursor"] is None

    def test_history_for_non_participant(self, api, services, alice, bob, carol):
        conversation, _ = services.conversations.resolve_direct(alice, bob)

        response = api(carol).get(f"/messages/conversations/{conversation.id}/messages")

        assert_error(response, 403, "NOT_PARTICIPANT")

    def test_mark_read(self, api, alice, bob, make_mutual):
        make_mutual(alice, bob)
        sent = api(alice).post("/messages/send", {"receiverUsername": "bob", "content": "hi"}).json()
        conversation_id = sent["conversation"]["id"]

        response = api(bob).post(f"/messages/conversations/{conversation_id}/read")

        assert response.json() == {"success": True, "markedRead": 1}

    def test_can_message_check(self, api, alice, bob, make_mutual):
        make_mutual(alice, bob)

        body = api(alice).get("/messages/can-message/bob").json()

        assert body["canMessage"] is True
        assert body["reason"] == "mutual"

    def test_upload_without_file(self, api, alice):
        response = api(alice).client.post("/messages/upload", HTTP_X_EXTERNAL_USER_ID=alice.external_id)

        assert_error(response, 400, "NO_FILE")

    def test_create_group_then_reuse(self, api, alice, bob, carol):
        payload = {"name": "Squad", "participantUsernames": ["bob", "carol"]}

        created = api(alice).post("/messages/groups", payload)
        again = api(alice).post("/messages/groups", payload)

        assert created.status_code == 201
        assert created.json()["created"] is True
        assert again.status_code == 200
        assert again.json()["created"] is False
        assert again.json()["conversation"]["id"] == created.json()["conversation"]["id"]

    def test_create_group_too_small(self, api, alice, bob):
        response = api(alice).post("/messages/groups", {"name": "Pair", "participantUsernames": ["bob"]})

        assert_error(response, 400, "VALIDATION_ERROR")
        assert response.json()["error"] == "Group needs at least 3 members (you + 2 others)"


# =============================================================================
# Friends
# =============================================================================

class TestFriendEndpoints:

    def test_request_accept_and_list(self, api, alice, bob):
        sent = api(alice).post("/friends/request", {"friendId": "bob"})
        assert sent.status_code == 201
        request_id = sent.json()["request"]["id"]

        pending = api(bob).get("/friends/request").json()
        assert [r["id"] for r in pending["requests"]] == [request_id]

        accepted = api(bob).patch(f"/friends/request/{request_id}", {"status": "ACCEPTED"})
        assert accepted.status_code == 200
        assert accepted.json()["request"]["status"] == "ACCEPTED"

        friends = api(alice).get("/friends").json()
        assert [f["username"] for f in friends["friends"]] == ["bob"]
        assert friends["count"] == 1

    def test_answering_twice(self, api, alice, bob):
        request_id = api(alice).post("/friends/request", {"friendId": "bob"}).json()["request"]["id"]
        api(bob).patch(f"/friends/request/{request_id}", {"status": "REJECTED"})

        response = api(bob).patch(f"/friends/request/{request_id}", {"status": "ACCEPTED"})

        assert_error(response, 409, "ALREADY_HANDLED")

    def test_request_from_unknown_profile(self, api, bob):
        response = api(external_id="ext_nobody").post("/friends/request", {"friendId": "bob"})

        assert_error(response, 404, "SENDER_NOT_FOUND")

    def test_request_to_unknown_user(self, api, alice):
        response = api(alice).post("/friends/request", {"friendId": "ghost"})

        assert_error(response, 404, "RECEIVER_NOT_FOUND")

    def test_invalid_status(self, api, alice, bob):
        request_id = api(alice).post("/friends/request", {"friendId": "bob"}).json()["request"]["id"]

        response = api(bob).patch(f"/friends/request/{request_id}", {"status": "MAYBE"})

        assert_error(response, 400, "INVALID_STATUS")


# =============================================================================
# Follow & notifications
# =============================================================================

class TestFollowAndNotificationEndpoints:

    def test_follow_and_unfollow(self, api, alice, bob):
        followed = api(alice).post("/follow/bob").json()
        assert followed["isFollowing"] is True
        assert followed["followerCount"] == 1

        unfollowed = api(alice).delete("/follow/bob").json()
        assert unfollowed["isFollowing"] is False

    def test_follow_twice(self, api, alice, bob):
        api(alice).post("/follow/bob")

        response = api(alice).post("/follow/bob")

        assert_error(response, 409, "ALREADY_FOLLOWING")

    def test_followers_list(self, api, alice, bob, carol, follow):
        follow(bob, alice)
        follow(carol, alice)

        body = api(bob).get("/follow/alice/followers").json()

        assert body["total"] == 2
        assert {f["user"]["username"] for f in body["followers"]} == {"bob", "carol"}

    def test_notifications_list_and_mark_all(self, api, alice, bob):
        api(alice).post("/follow/bob")

        inbox = api(bob).get("/notifications").json()
        assert inbox["unreadCount"] == 1
        assert inbox["notifications"][0]["type"] == "NEW_FOLLOWER"
        assert inbox["notifications"][0]["actor"]["username"] == "alice"

        marked = api(bob).post("/notifications", {"all": True}).json()
        assert marked["updated"] == 1
        assert api(bob).get("/notifications").json()["unreadCount"] == 0

    @pytest.mark.parametrize("ids", [["abc"], [1.5], "5"])
    def test_mark_read_with_malformed_ids(self, api, alice, bob, ids):
        api(alice).post("/follow/bob")

        response = api(bob).post("/notifications", {"ids": ids})

        assert_error(response, 400, "VALIDATION_ERROR")
        assert Notification.objects.filter(user=bob, is_read=False).count() == 1

    def test_mark_read_by_ids(self, api, alice, bob):
        api(alice).post("/follow/bob")
        notification = Notification.objects.get(user=bob)

        body = api(bob).post("/notifications", {"ids": [str(notification.id)]}).json()

        assert body["updated"] == 1
        notification.refresh_from_db()
        assert notification.is_read is True

    def test_mark_unknown_notification(self, api, alice):
        response = api(alice).post("/notifications/999/read")

        assert_error(response, 404, "NOTIFICATION_NOT_FOUND")
