# =============================================================================
# tests/test_conversations.py - Conversation Resolver Tests
# =============================================================================
# Covers:
# - One direct conversation per unordered pair (service and database level)
# - Group creation rules and idempotency
# - Group administration (add / remove / rename)
# - Membership checks and the caller's conversation list
#
# Run with: pytest tests/test_conversations.py -v
# =============================================================================

from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from social.errors import ApiError, ErrorCode
from social.models import Conversation, ConversationMember, Message, make_pair_key

pytestmark = pytest.mark.django_db


# =============================================================================
# Direct conversations
# =============================================================================

class TestDirectConversation:
    """Tests for ConversationService.resolve_direct."""

    def test_creates_conversation_with_both_members(self, services, alice, bob):
        conversation, created = services.conversations.resolve_direct(alice, bob)

        assert created is True
        assert conversation.is_group is False
        assert conversation.pair_key == make_pair_key(alice.id, bob.id)
        members = set(conversation.members.values_list("user_id", flat=True))
        assert members == {alice.id, bob.id}

    def test_reuses_conversation_in_either_order(self, services, alice, bob):
        first, _ = services.conversations.resolve_direct(alice, bob)

        again, created_again = services.conversations.resolve_direct(alice, bob)
        reverse, created_reverse = services.conversations.resolve_direct(bob, alice)

        assert created_again is False
        assert created_reverse is False
        assert again.id == first.id == reverse.id
        assert Conversation.objects.count() == 1
        assert ConversationMember.objects.count() == 2

    def test_database_rejects_duplicate_pair(self, alice, bob):
        key = make_pair_key(bob.id, alice.id)
        Conversation.objects.create(pair_key=key)

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Conversation.objects.create(pair_key=key)

    def test_pair_key_is_order_independent(self):
        assert make_pair_key(7, 3) == make_pair_key(3, 7) == "3:7"

    def test_self_conversation_is_invalid(self, services, alice):
        with pytest.raises(ApiError) as exc:
            services.conversations.resolve_direct(alice, alice)

        assert exc.value.code == ErrorCode.INVALID_OPERATION


# =============================================================================
# Groups
# =============================================================================

class TestGroupCreation:
    """Tests for ConversationService.create_group."""

    def test_creates_group_with_creator_as_admin(self, services, alice, bob, carol):
        conversation, created = services.conversations.create_group(alice, "Saturday Squad", ["bob", "carol"])

        assert created is True
        assert conversation.is_group is True
        assert conversation.pair_key is None
        assert conversation.created_by == alice
        members = {m.user_id: m.is_admin for m in conversation.members.all()}
        assert members == {alice.id: True, bob.id: False, carol.id: False}

    def test_same_name_and_members_returns_existing(self, services, alice, bob, carol):
        first, _ = services.conversations.create_group(alice, "Saturday Squad", ["bob", "carol"])

        # Different order and case, same member set
        again, created = services.conversations.create_group(alice, "Saturday Squad", ["Carol", "bob"])

        assert created is False
        assert again.id == first.id
        assert Conversation.objects.filter(is_group=True).count() == 1

    def test_different_name_creates_new_group(self, services, alice, bob, carol):
        first, _ = services.conversations.create_group(alice, "Saturday Squad", ["bob", "carol"])
        second, created = services.conversations.create_group(alice, "Sunday Squad", ["bob", "carol"])

        assert created is True
        assert second.id != first.id

    def test_different_members_creates_new_group(self, services, alice, bob, carol, dave):
        first, _ = services.conversations.create_group(alice, "Squad", ["bob", "carol"])
        second, created = services.conversations.create_group(alice, "Squad", ["bob", "carol", "dave"])

        assert created is True
        assert second.id != first.id

    def test_needs_two_other_members(self, services, alice, bob):
        with pytest.raises(ApiError) as exc:
            services.conversations.create_group(alice, "Pair", ["bob"])

        assert exc.value.code == ErrorCode.VALIDATION_ERROR
        assert exc.value.message == "Group needs at least 3 members (you + 2 others)"

    def test_creator_handle_does_not_count(self, services, alice, bob):
        with pytest.raises(ApiError) as exc:
            services.conversations.create_group(alice, "Pair", ["alice", "bob"])

        assert exc.value.code == ErrorCode.VALIDATION_ERROR

    def test_name_is_required(self, services, alice, bob, carol):
        with pytest.raises(ApiError) as exc:
            services.conversations.create_group(alice, "   ", ["bob", "carol"])

        assert exc.value.code == ErrorCode.VALIDATION_ERROR

    def test_duplicate_participants_rejected(self, services, alice, bob):
        with pytest.raises(ApiError) as exc:
            services.conversations.create_group(alice, "Dupes", ["bob", "BOB"])

        assert exc.value.code == ErrorCode.VALIDATION_ERROR

    def test_unknown_participant(self, services, alice, bob):
        with pytest.raises(ApiError) as exc:
            services.conversations.create_group(alice, "Squad", ["bob", "ghost"])

        assert exc.value.code == ErrorCode.USER_NOT_FOUND
        assert exc.value.details == {"missing": ["ghost"]}
        assert Conversation.objects.count() == 0


class TestGroupAdministration:
    """Tests for add / remove / update on groups."""

    @pytest.fixture
    def squad(self, services, alice, bob, carol):
        conversation, _ = services.conversations.create_group(alice, "Squad", ["bob", "carol"])
        return conversation

    def test_admin_adds_participant(self, services, squad, alice, dave):
        services.conversations.add_participant(alice, squad.id, "dave")

        assert squad.members.filter(user=dave).exists()

    def test_non_admin_cannot_add(self, services, squad, bob, dave):
        with pytest.raises(ApiError) as exc:
            services.conversations.add_participant(bob, squad.id, "dave")

        assert exc.value.code == ErrorCode.FORBIDDEN

    def test_adding_existing_member_is_invalid(self, services, squad, alice):
        with pytest.raises(ApiError) as exc:
            services.conversations.add_participant(alice, squad.id, "bob")

        assert exc.value.code == ErrorCode.INVALID_OPERATION

    def test_remove_keeps_minimum_size(self, services, squad, alice, dave):
        services.conversations.add_participant(alice, squad.id, "dave")

        services.conversations.remove_participant(alice, squad.id, "dave")
        assert squad.members.count() == 3

        with pytest.raises(ApiError) as exc:
            services.conversations.remove_participant(alice, squad.id, "carol")
        assert exc.value.code == ErrorCode.INVALID_OPERATION

    def test_last_admin_cannot_be_removed(self, services, squad, alice, dave):
        # Arrange: room above the minimum size, alice is the only admin
        services.conversations.add_participant(alice, squad.id, "dave")

        # Act
        with pytest.raises(ApiError) as exc:
            services.conversations.remove_participant(alice, squad.id, "alice")

        # Assert: alice is still in the group and still its admin
        assert exc.value.code == ErrorCode.INVALID_OPERATION
        assert squad.members.count() == 4
        assert list(squad.members.filter(is_admin=True).values_list("user_id", flat=True)) == [alice.id]

    def test_update_group_name(self, services, squad, alice):
        updated = services.conversations.update_group(alice, squad.id, name="Renamed", description="Trail runs")

        squad.refresh_from_db()
        assert updated.name == squad.name == "Renamed"
        assert squad.description == "Trail runs"

    def test_direct_conversation_has_no_group_settings(self, services, alice, bob):
        direct, _ = services.conversations.resolve_direct(alice, bob)

        with pytest.raises(ApiError) as exc:
            services.conversations.update_group(alice, direct.id, name="Nope")

        assert exc.value.code == ErrorCode.INVALID_OPERATION


# =============================================================================
# Membership & listing
# =============================================================================

class TestMembership:
    """Tests for require_member and list_for."""

    def test_unknown_conversation(self, services, alice):
        with pytest.raises(ApiError) as exc:
            services.conversations.require_member(alice, 9999)

        assert exc.value.code == ErrorCode.CONVERSATION_NOT_FOUND

    def test_non_member(self, services, alice, bob, carol):
        conversation, _ = services.conversations.resolve_direct(alice, bob)

        with pytest.raises(ApiError) as exc:
            services.conversations.require_member(carol, conversation.id)

        assert exc.value.code == ErrorCode.NOT_PARTICIPANT

    def test_list_is_most_recent_first_with_unread_counts(self, services, alice, bob, carol):
        # Arrange: two conversations, the older one has newer activity
        with_bob, _ = services.conversations.resolve_direct(alice, bob)
        with_carol, _ = services.conversations.resolve_direct(alice, carol)
        now = timezone.now()
        Message.objects.create(conversation=with_bob, sender=bob, content="one", timestamp=now)
        Message.objects.create(conversation=with_bob, sender=bob, content="two", timestamp=now)
        services.conversations.touch(with_bob, now + timedelta(minutes=5))

        # Act
        page = services.conversations.list_for(alice)

        # Assert
        assert [c.id for c in page.items] == [with_bob.id, with_carol.id]
        assert page.total == 2
        assert page.items[0].unread_count == 2
        assert page.items[0].last_message.content in ("one", "two")
        assert page.items[1].unread_count == 0
        assert page.items[1].last_message is None

    def test_list_excludes_other_users_conversations(self, services, alice, bob, carol):
        services.conversations.resolve_direct(bob, carol)

        page = services.conversations.list_for(alice)

        assert page.items == []
        assert page.has_more is False
