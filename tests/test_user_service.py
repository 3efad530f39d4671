from datetime import datetime, timedelta

import pytest

from socialnet.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from socialnet.core.security import TOKEN_TYPE_USER, get_token_subject
from socialnet.crud import crud_user
from socialnet.models.notification import NotificationType
from socialnet.schemas.user import PrivacySettingsUpdate, UserCreate, UserUpdate
from socialnet.services.notification_service import notification_service
from socialnet.services.post_service import post_service
from socialnet.services.user_service import user_service


def new_user(username, **extra):
    return UserCreate(username=username, email=f"{username}@example.com", password="secret123", **extra)


def test_register_and_login(db):
    user = user_service.register(db, new_user("alice"))
    assert user.password_hash != "secret123"

    logged_in, token = user_service.login(db, identifier="alice@example.com", password="secret123")
    assert logged_in.id == user.id
    assert logged_in.last_login_at is not None
    assert get_token_subject(token, TOKEN_TYPE_USER) == user.id


def test_register_conflicts(db):
    user_service.register(db, new_user("alice", phone_number="+33612345678"))

    with pytest.raises(ConflictError):
        user_service.register(db, new_user("alice"))
    with pytest.raises(ConflictError):
        user_service.register(db, UserCreate(username="alice2", email="alice@example.com", password="secret123"))
    with pytest.raises(ConflictError):
        user_service.register(db, new_user("alice3", phone_number="+33612345678"))


def test_invalid_username_rejected():
    with pytest.raises(ValueError):
        new_user("no spaces allowed")


def test_login_failures(db, make_user):
    alice = make_user("alice")
    with pytest.raises(UnauthorizedError):
        user_service.login(db, identifier="alice", password="wrong")

    crud_user.update(db, db_obj=alice, obj_in={"suspended_until": datetime.utcnow() + timedelta(days=1)})
    with pytest.raises(ForbiddenError):
        user_service.login(db, identifier="alice", password="secret123")

    user_service.deactivate(db, alice, reason="leaving")
    with pytest.raises(ForbiddenError):
        user_service.login(db, identifier="alice", password="secret123")


def test_profile_counts(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    make_post(alice)
    user_service.toggle_follow(db, follower_id=bob.id, target_id=alice.id)

    profile = user_service.get_profile(db, alice.id)
    assert profile["username"] == "alice"
    assert (profile["follower_count"], profile["following_count"], profile["post_count"]) == (1, 0, 1)

    with pytest.raises(NotFoundError):
        user_service.get_profile(db, 999)


def test_update_profile_phone_conflict(db, make_user):
    alice = make_user("alice", phone_number="+33600000001")
    bob = make_user("bob")

    updated = user_service.update_profile(db, bob, UserUpdate(bio="hi"))
    assert updated.bio == "hi"
    with pytest.raises(ConflictError):
        user_service.update_profile(db, bob, UserUpdate(phone_number=alice.phone_number))


def test_toggle_follow(db, make_user, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")

    assert user_service.toggle_follow(db, follower_id=alice.id, target_id=bob.id) == ("followed", 1)
    assert [u.id for u in user_service.get_followers(db, bob.id)] == [alice.id]
    assert [u.id for u in user_service.get_following(db, alice.id)] == [bob.id]

    notes, total, _ = notification_service.list_for_user(db, user_id=bob.id)
    assert total == 1 and notes[0].notification_type == NotificationType.FOLLOW.value

    assert user_service.toggle_follow(db, follower_id=alice.id, target_id=bob.id) == ("unfollowed", 0)
    assert user_service.get_followers(db, bob.id) == []


def test_follow_rules(db, make_user):
    alice = make_user("alice")
    with pytest.raises(ValidationError):
        user_service.toggle_follow(db, follower_id=alice.id, target_id=alice.id)
    with pytest.raises(NotFoundError):
        user_service.toggle_follow(db, follower_id=alice.id, target_id=999)


def test_block_drops_follows_and_prevents_follow(db, make_user, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    user_service.toggle_follow(db, follower_id=alice.id, target_id=bob.id)
    user_service.toggle_follow(db, follower_id=bob.id, target_id=alice.id)

    user_service.block(db, blocker_id=alice.id, target_id=bob.id)

    assert crud_user.get_following_ids(db, alice.id) == set()
    assert crud_user.get_following_ids(db, bob.id) == set()
    with pytest.raises(ForbiddenError):
        user_service.toggle_follow(db, follower_id=bob.id, target_id=alice.id)
    with pytest.raises(ForbiddenError):
        user_service.toggle_follow(db, follower_id=alice.id, target_id=bob.id)

    user_service.unblock(db, blocker_id=alice.id, target_id=bob.id)
    assert user_service.toggle_follow(db, follower_id=bob.id, target_id=alice.id)[0] == "followed"

    with pytest.raises(NotFoundError):
        user_service.unblock(db, blocker_id=alice.id, target_id=bob.id)
    with pytest.raises(ValidationError):
        user_service.block(db, blocker_id=alice.id, target_id=alice.id)


def test_search_and_suggestions(db, make_user, push_sink):
    alice = make_user("alice")
    bob = make_user("bobby", full_name="Bob Builder")
    carol = make_user("carol")
    user_service.toggle_follow(db, follower_id=alice.id, target_id=carol.id)

    found, total = user_service.search(db, query="builder", requester_id=alice.id)
    assert total == 1 and found[0].id == bob.id
    with pytest.raises(ValidationError):
        user_service.search(db, query=" ", requester_id=alice.id)

    suggested = {u.id for u in user_service.get_suggested(db, user_id=alice.id)}
    assert alice.id not in suggested
    assert carol.id not in suggested
    assert bob.id in suggested


def test_search_treats_underscore_literally(db, make_user):
    alice = make_user("alice")
    exact = make_user("a_b")
    make_user("axb")

    found, total = user_service.search(db, query="a_b", requester_id=alice.id)
    assert total == 1 and found[0].id == exact.id


# ----- Privacy -----

def test_privacy_settings_update(db, make_user):
    alice = make_user("alice")
    assert user_service.get_privacy_settings(alice) == {
        "profile": "public", "posts": "public", "friends_list": "public",
    }

    updated = user_service.update_privacy_settings(
        db, alice, PrivacySettingsUpdate(posts="friends", friends_list="private")
    )
    assert updated == {"profile": "public", "posts": "friends", "friends_list": "private"}

    with pytest.raises(ValidationError):
        user_service.update_privacy_settings(db, alice, PrivacySettingsUpdate())


def test_privacy_level_must_be_known():
    with pytest.raises(ValueError):
        PrivacySettingsUpdate(profile="everyone")


def test_privacy_is_enforced_on_reads(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    make_post(alice)
    user_service.toggle_follow(db, follower_id=alice.id, target_id=bob.id)
    user_service.toggle_follow(db, follower_id=bob.id, target_id=alice.id)
    user_service.toggle_follow(db, follower_id=carol.id, target_id=alice.id)
    user_service.update_privacy_settings(
        db, alice, PrivacySettingsUpdate(profile="private", posts="friends", friends_list="private")
    )

    # bob follows back, carol only follows
    _, total = post_service.get_user_posts(db, user_id=alice.id, viewer_id=bob.id)
    assert total == 1
    with pytest.raises(ForbiddenError):
        post_service.get_user_posts(db, user_id=alice.id, viewer_id=carol.id)

    with pytest.raises(ForbiddenError):
        user_service.get_profile(db, alice.id, viewer_id=bob.id)
    with pytest.raises(ForbiddenError):
        user_service.get_followers(db, alice.id, viewer_id=bob.id)

    assert user_service.get_profile(db, alice.id, viewer_id=alice.id)["id"] == alice.id
    assert {u.id for u in user_service.get_followers(db, alice.id, viewer_id=alice.id)} == {bob.id, carol.id}
    assert user_service.get_profile(db, alice.id)["id"] == alice.id
