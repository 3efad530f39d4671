import pytest
from sqlalchemy import func, select

from socialnet.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from socialnet.crud import crud_comment, crud_like, crud_post, crud_user
from socialnet.models.like import Like
from socialnet.models.notification import Notification, NotificationType
from socialnet.models.post import ModerationStatus
from socialnet.schemas.comment import CommentCreate, CommentUpdate
from socialnet.schemas.post import PostCreate, PostUpdate
from socialnet.services.comment_service import comment_service
from socialnet.services.post_service import post_service
from socialnet.services.user_service import user_service


def notifications_of(db, recipient_id, notification_type):
    stmt = select(Notification).where(
        Notification.recipient_id == recipient_id,
        Notification.notification_type == notification_type,
    )
    return list(db.scalars(stmt).all())


# ----- Publishing -----

def test_create_post_notifies_followers_and_mentions(db, make_user, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    user_service.toggle_follow(db, follower_id=bob.id, target_id=alice.id)

    post = post_service.create_post(
        db,
        author_id=alice.id,
        post_in=PostCreate(text="hello @carol", mentions=[carol.id, 9999]),
    )

    new_post = notifications_of(db, bob.id, NotificationType.NEW_POST.value)
    assert len(new_post) == 1
    assert new_post[0].sender_id == alice.id
    assert new_post[0].post_id == post.id

    mentions = notifications_of(db, carol.id, NotificationType.MENTION.value)
    assert [n.post_id for n in mentions] == [post.id]


def test_post_needs_content():
    with pytest.raises(ValueError):
        PostCreate(text="   ")


def test_update_post_only_by_author(db, make_user, make_post):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice, text="v1")

    with pytest.raises(ForbiddenError):
        post_service.update_post(db, post_id=post.id, user_id=bob.id, post_in=PostUpdate(text="hack"))

    updated = post_service.update_post(db, post_id=post.id, user_id=alice.id, post_in=PostUpdate(text="v2"))
    assert updated.text == "v2"
    assert updated.is_edited is True


def test_update_post_cannot_become_empty(db, make_user, make_post):
    alice = make_user("alice")
    post = make_post(alice, text="only text")
    with pytest.raises(ValidationError):
        post_service.update_post(db, post_id=post.id, user_id=alice.id, post_in=PostUpdate(text=""))


def test_delete_post_only_by_author(db, make_user, make_post, media_store):
    alice = make_user("alice")
    bob = make_user("bob")
    post_id = make_post(alice).id

    with pytest.raises(ForbiddenError):
        post_service.delete_post(db, post_id=post_id, user_id=bob.id)

    post_service.delete_post(db, post_id=post_id, user_id=alice.id)
    db.expire_all()
    assert crud_post.get(db, post_id) is None


# ----- Likes -----

def test_like_toggle_keeps_single_record(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice)

    states = []
    for _ in range(3):
        like, post = post_service.toggle_like(db, post_id=post.id, user_id=bob.id)
        states.append((like.is_liked, post.like_count, bob.id in crud_post.get_liker_ids(db, post.id)))

    assert states == [(True, 1, True), (False, 0, False), (True, 1, True)]
    likes = db.scalar(select(func.count(Like.id)).where(Like.post_id == post.id, Like.user_id == bob.id))
    assert likes == 1
    assert crud_like.has_user_liked(db, user_id=bob.id, post_id=post.id)


def test_only_first_like_notifies(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice)

    for _ in range(3):
        post_service.toggle_like(db, post_id=post.id, user_id=bob.id)

    assert len(notifications_of(db, alice.id, NotificationType.LIKE.value)) == 1


def test_self_like_does_not_notify(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    post = make_post(alice)

    like, post = post_service.toggle_like(db, post_id=post.id, user_id=alice.id)

    assert like.is_liked is True
    assert post.like_count == 1
    assert notifications_of(db, alice.id, NotificationType.LIKE.value) == []


def test_like_counts_across_users(db, make_user, make_post):
    alice = make_user("alice")
    post = make_post(alice)
    fans = [make_user(f"fan{i}") for i in range(4)]

    for fan in fans:
        post_service.toggle_like(db, post_id=post.id, user_id=fan.id)
    post_service.toggle_like(db, post_id=post.id, user_id=fans[0].id)

    db.expire_all()
    refreshed = crud_post.get(db, post.id)
    assert refreshed.like_count == 3
    assert sorted(refreshed.liker_ids) == sorted(f.id for f in fans[1:])


def test_like_missing_post(db, make_user):
    bob = make_user("bob")
    with pytest.raises(NotFoundError):
        post_service.toggle_like(db, post_id=42, user_id=bob.id)


# ----- Lookups -----

def test_search_and_popular(db, make_user, make_post):
    alice = make_user("alice")
    bob = make_user("bob")
    quiet = make_post(alice, text="Quiet morning")
    loud = make_post(alice, text="Loud party tonight")
    post_service.toggle_like(db, post_id=loud.id, user_id=bob.id)

    found, total = post_service.search(db, query="PARTY")
    assert total == 1 and found[0].id == loud.id

    popular = post_service.get_popular(db, limit=2)
    assert [p.id for p in popular] == [loud.id, quiet.id]

    with pytest.raises(ValidationError):
        post_service.search(db, query="  ")


def test_user_posts_unknown_user(db):
    with pytest.raises(NotFoundError):
        post_service.get_user_posts(db, user_id=77)


# ----- Comments -----

def test_comment_increments_count_and_notifies_owner(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice)

    comment = comment_service.add_comment(db, post_id=post.id, user_id=bob.id, comment_in=CommentCreate(text="nice"))

    assert crud_post.get(db, post.id).comment_count == 1
    notes = notifications_of(db, alice.id, NotificationType.COMMENT.value)
    assert len(notes) == 1 and notes[0].sender_id == bob.id
    assert comment.is_reply is False


def test_reply_notifies_parent_author(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    post = make_post(alice)
    root = comment_service.add_comment(db, post_id=post.id, user_id=bob.id, comment_in=CommentCreate(text="first"))

    reply = comment_service.add_comment(
        db, post_id=post.id, user_id=carol.id,
        comment_in=CommentCreate(text="agreed", parent_comment_id=root.id),
    )

    assert reply.parent_comment_id == root.id
    replies = notifications_of(db, bob.id, NotificationType.COMMENT.value)
    assert replies[0].content == "carol replied to your comment"
    top_level, total = comment_service.list_comments(db, post_id=post.id)
    assert [c.id for c in top_level] == [root.id] and total == 1
    children, _ = comment_service.list_replies(db, comment_id=root.id)
    assert [c.id for c in children] == [reply.id]


def test_reply_must_target_same_post(db, make_user, make_post):
    alice = make_user("alice")
    first = make_post(alice, text="first")
    second = make_post(alice, text="second")
    root = comment_service.add_comment(db, post_id=first.id, user_id=alice.id, comment_in=CommentCreate(text="x"))

    with pytest.raises(ValidationError):
        comment_service.add_comment(
            db, post_id=second.id, user_id=alice.id,
            comment_in=CommentCreate(text="y", parent_comment_id=root.id),
        )
    with pytest.raises(NotFoundError):
        comment_service.add_comment(
            db, post_id=first.id, user_id=alice.id,
            comment_in=CommentCreate(text="y", parent_comment_id=5000),
        )


def test_comment_edit_and_delete_permissions(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    post = make_post(alice)
    comment = comment_service.add_comment(db, post_id=post.id, user_id=bob.id, comment_in=CommentCreate(text="hi"))
    comment_id = comment.id

    with pytest.raises(ForbiddenError):
        comment_service.update_comment(db, comment_id=comment_id, user_id=alice.id, comment_in=CommentUpdate(text="no"))
    edited = comment_service.update_comment(db, comment_id=comment_id, user_id=bob.id, comment_in=CommentUpdate(text="hey"))
    assert edited.text == "hey" and edited.is_edited

    with pytest.raises(ForbiddenError):
        comment_service.delete_comment(db, comment_id=comment_id, user_id=carol.id)
    # Post owner may remove comments on their post
    comment_service.delete_comment(db, comment_id=comment_id, user_id=alice.id)
    db.expire_all()
    assert crud_post.get(db, post.id).comment_count == 0


def test_comment_like_toggle(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice)
    comment = comment_service.add_comment(db, post_id=post.id, user_id=alice.id, comment_in=CommentCreate(text="hi"))

    action, comment = comment_service.toggle_like(db, comment_id=comment.id, user_id=bob.id)
    assert (action, comment.like_count) == ("liked", 1)
    action, comment = comment_service.toggle_like(db, comment_id=comment.id, user_id=bob.id)
    assert (action, comment.like_count) == ("unliked", 0)


def test_search_treats_wildcards_literally(db, make_user, make_post):
    alice = make_user("alice")
    literal = make_post(alice, text="100% sure")
    make_post(alice, text="1000 reasons")

    found, total = post_service.search(db, query="0%")
    assert total == 1 and found[0].id == literal.id


# ----- Saves and shares -----

def test_toggle_save(db, make_user, make_post):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice)

    action, saved = post_service.toggle_save(db, post_id=post.id, user_id=bob.id)
    assert (action, saved.save_count) == ("saved", 1)
    listed, total = post_service.get_saved_posts(db, user_id=bob.id)
    assert total == 1 and [p.id for p in listed] == [post.id]

    action, saved = post_service.toggle_save(db, post_id=post.id, user_id=bob.id)
    assert (action, saved.save_count) == ("unsaved", 0)
    assert post_service.get_saved_posts(db, user_id=bob.id) == ([], 0)

    with pytest.raises(NotFoundError):
        post_service.toggle_save(db, post_id=404, user_id=bob.id)


def test_share_points_at_original_and_notifies(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice, text="original")

    share = post_service.share_post(db, post_id=post.id, user_id=bob.id, text="  look at this  ")
    assert share.is_share
    assert share.shared_post_id == post.id
    assert share.author_user_id == bob.id
    assert share.text == "look at this"
    assert crud_post.get(db, post.id).share_count == 1

    shared = notifications_of(db, alice.id, NotificationType.NEW_POST.value)
    assert [n.content for n in shared] == ["bob shared your post"]
    assert shared[0].post_id == post.id


def test_self_share_does_not_notify(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    post = make_post(alice)
    post_service.share_post(db, post_id=post.id, user_id=alice.id)
    assert notifications_of(db, alice.id, NotificationType.NEW_POST.value) == []


def test_bare_share_can_be_edited(db, make_user, make_post):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice)

    share = post_service.share_post(db, post_id=post.id, user_id=bob.id, text="   ")
    assert share.text is None

    updated = post_service.update_post(db, post_id=share.id, user_id=bob.id, post_in=PostUpdate(text="later"))
    assert updated.text == "later"


def test_rejected_or_missing_post_cannot_be_shared(db, make_user, make_post):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice)
    crud_post.update(db, db_obj=post, obj_in={"moderation_status": ModerationStatus.REJECTED.value})

    with pytest.raises(NotFoundError):
        post_service.share_post(db, post_id=post.id, user_id=bob.id)
    with pytest.raises(NotFoundError):
        post_service.share_post(db, post_id=404, user_id=bob.id)


# ----- Comment rankings -----

def test_popular_comments_and_stats(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    bob = make_user("bob")
    post = make_post(alice)

    def comment(text, parent=None):
        return comment_service.add_comment(
            db, post_id=post.id, user_id=alice.id,
            comment_in=CommentCreate(text=text, parent_comment_id=parent),
        )

    quiet = comment("quiet")
    liked = comment("liked")
    discussed = comment("discussed")
    reply = comment("reply", parent=discussed.id)
    hidden = comment("hidden")
    comment_service.toggle_like(db, comment_id=liked.id, user_id=bob.id)
    crud_comment.update(db, db_obj=hidden, obj_in={"moderation_status": ModerationStatus.REJECTED.value})

    popular = comment_service.get_popular_comments(db, post_id=post.id)
    assert [c.id for c in popular] == [liked.id, discussed.id, reply.id, quiet.id]

    stats = comment_service.get_comment_stats(db, post_id=post.id)
    assert stats["post_id"] == post.id
    assert stats["total_comments"] == 3
    assert stats["total_replies"] == 1
    assert [c.id for c in stats["popular_comments"]] == [c.id for c in popular]

    with pytest.raises(NotFoundError):
        comment_service.get_comment_stats(db, post_id=404)
    with pytest.raises(NotFoundError):
        comment_service.get_popular_comments(db, post_id=404)
