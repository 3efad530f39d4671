from conftest import admin_headers, user_headers

from socialnet.services.deletion_service import CascadeError, CascadeResult, deletion_service

API = "/api/v1"
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 32


def register(client, username, password="secret123"):
    response = client.post(f"{API}/auth/register", json={
        "username": username,
        "email": f"{username}@example.com",
        "password": password,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return body["user"]["id"], {"Authorization": f"Bearer {body['access_token']}"}


# ----- Auth -----

def test_register_login_and_me(client):
    user_id, headers = register(client, "alice")

    response = client.post(f"{API}/auth/login", json={"identifier": "alice", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["user_id"] == user_id

    me = client.get(f"{API}/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["username"] == "alice"
    assert "password_hash" not in me.json()


def test_form_token_login(client):
    register(client, "alice")
    response = client.post(f"{API}/auth/token", data={"username": "alice", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_duplicate_registration_conflicts(client):
    register(client, "alice")
    response = client.post(f"{API}/auth/register", json={
        "username": "alice", "email": "other@example.com", "password": "secret123",
    })
    assert response.status_code == 409


def test_bad_credentials_and_missing_token(client):
    register(client, "alice")
    response = client.post(f"{API}/auth/login", json={"identifier": "alice", "password": "nope"})
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"

    assert client.get(f"{API}/auth/me").status_code == 401
    assert client.get(f"{API}/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_admin_token_is_not_a_user_token(client, make_admin):
    admin = make_admin()
    assert client.get(f"{API}/auth/me", headers=admin_headers(admin)).status_code == 401


# ----- Posts, likes, comments -----

def test_post_like_comment_flow(client, push_sink):
    alice_id, alice = register(client, "alice")
    bob_id, bob = register(client, "bob")

    follow = client.post(f"{API}/users/{alice_id}/follow", headers=bob)
    assert follow.json() == {"target_id": alice_id, "action": "followed", "follower_count": 1}

    created = client.post(f"{API}/posts", json={"text": "hello"}, headers=alice)
    assert created.status_code == 201
    post_id = created.json()["id"]

    feed = client.get(f"{API}/posts/feed", params={"limit": 10}, headers=bob)
    assert [p["id"] for p in feed.json()["posts"]].count(post_id) == 1

    liked = client.post(f"{API}/posts/{post_id}/like", headers=bob)
    assert liked.json()["is_liked"] is True and liked.json()["like_count"] == 1
    unliked = client.post(f"{API}/posts/{post_id}/like", headers=bob)
    assert unliked.json()["is_liked"] is False and unliked.json()["like_count"] == 0

    comment = client.post(f"{API}/posts/{post_id}/comments", json={"text": "welcome"}, headers=bob)
    assert comment.status_code == 201
    comments = client.get(f"{API}/posts/{post_id}/comments", headers=alice)
    assert comments.json()["total"] == 1

    notifications = client.get(f"{API}/notifications", headers=alice).json()
    types = sorted(n["notification_type"] for n in notifications["notifications"])
    assert types == ["comment", "follow", "like"]


def test_post_validation_and_ownership(client):
    _, alice = register(client, "alice")
    _, bob = register(client, "bob")

    assert client.post(f"{API}/posts", json={"text": ""}, headers=alice).status_code == 422
    assert client.post(f"{API}/posts", json={"text": "x" * 501}, headers=alice).status_code == 422

    post_id = client.post(f"{API}/posts", json={"text": "mine"}, headers=alice).json()["id"]
    assert client.put(f"{API}/posts/{post_id}", json={"text": "yours"}, headers=bob).status_code == 403
    assert client.delete(f"{API}/posts/{post_id}", headers=bob).status_code == 403
    assert client.delete(f"{API}/posts/{post_id}", headers=alice).status_code == 204
    assert client.get(f"{API}/posts/{post_id}", headers=alice).status_code == 404


def test_interrupted_cascade_reports_progress(client, monkeypatch):
    _, alice = register(client, "alice")
    post_id = client.post(f"{API}/posts", json={"text": "mine"}, headers=alice).json()["id"]

    def interrupted(db, post_id):
        result = CascadeResult(root_type="post", root_id=post_id)
        result.record("comments", "comments", 2)
        raise CascadeError(result, "likes")

    monkeypatch.setattr(deletion_service, "delete_post", interrupted)

    response = client.delete(f"{API}/posts/{post_id}", headers=alice)
    assert response.status_code == 500
    body = response.json()
    assert body["completed_steps"] == ["comments"]
    assert body["deleted"] == {"comments": 2}
    assert "likes" in body["detail"]


def test_save_share_and_comment_stats(client, push_sink):
    _, alice = register(client, "alice")
    _, bob = register(client, "bob")
    post_id = client.post(f"{API}/posts", json={"text": "hello"}, headers=alice).json()["id"]

    saved = client.post(f"{API}/posts/{post_id}/save", headers=bob)
    assert saved.status_code == 200
    assert saved.json() == {"post_id": post_id, "action": "saved", "save_count": 1}
    listing = client.get(f"{API}/posts/saved", headers=bob).json()
    assert [p["id"] for p in listing["posts"]] == [post_id]

    share = client.post(f"{API}/posts/{post_id}/share", json={"text": "look"}, headers=bob)
    assert share.status_code == 201
    assert share.json()["shared_post_id"] == post_id
    assert share.json()["is_share"] is True
    bare = client.post(f"{API}/posts/{post_id}/share", headers=bob)
    assert bare.status_code == 201 and bare.json()["text"] is None
    assert client.get(f"{API}/posts/{post_id}", headers=alice).json()["share_count"] == 2
    assert client.post(f"{API}/posts/999/share", headers=bob).status_code == 404

    client.post(f"{API}/posts/{post_id}/comments", json={"text": "first"}, headers=bob)
    stats = client.get(f"{API}/posts/{post_id}/comments/stats", headers=alice).json()
    assert stats["total_comments"] == 1 and stats["total_replies"] == 0
    assert [c["text"] for c in stats["popular_comments"]] == ["first"]
    popular = client.get(f"{API}/posts/{post_id}/comments/popular", params={"limit": 5}, headers=alice)
    assert popular.status_code == 200 and len(popular.json()) == 1
    assert client.get(f"{API}/posts/999/comments/popular", headers=alice).status_code == 404


def test_search_wildcards_are_literal(client):
    _, alice = register(client, "alice")
    client.post(f"{API}/posts", json={"text": "100% sure"}, headers=alice)
    client.post(f"{API}/posts", json={"text": "1000 reasons"}, headers=alice)
    found = client.get(f"{API}/posts/search", params={"q": "0%"}, headers=alice).json()
    assert [p["text"] for p in found["posts"]] == ["100% sure"]


def test_privacy_settings(client):
    alice_id, alice = register(client, "alice")
    _, bob = register(client, "bob")

    current = client.get(f"{API}/users/me/privacy", headers=alice)
    assert current.json() == {"profile": "public", "posts": "public", "friends_list": "public"}

    updated = client.put(f"{API}/users/me/privacy", json={"posts": "private"}, headers=alice)
    assert updated.status_code == 200
    assert updated.json()["posts"] == "private"
    assert client.put(f"{API}/users/me/privacy", json={"posts": "everyone"}, headers=alice).status_code == 422
    assert client.put(f"{API}/users/me/privacy", json={}, headers=alice).status_code == 400

    assert client.get(f"{API}/users/{alice_id}/posts", headers=bob).status_code == 403
    assert client.get(f"{API}/users/{alice_id}/posts", headers=alice).status_code == 200
    assert client.get(f"{API}/users/{alice_id}", headers=bob).status_code == 200


def test_feed_rejects_bad_paging(client):
    _, alice = register(client, "alice")
    assert client.get(f"{API}/posts/feed", params={"page": 0}, headers=alice).status_code == 422


def test_follow_self_is_rejected(client):
    alice_id, alice = register(client, "alice")
    assert client.post(f"{API}/users/{alice_id}/follow", headers=alice).status_code == 400


def test_unknown_user_is_404(client):
    _, alice = register(client, "alice")
    assert client.get(f"{API}/users/999", headers=alice).status_code == 404


# ----- Media and stories -----

def test_media_upload(client, media_store):
    _, alice = register(client, "alice")

    response = client.post(
        f"{API}/media/upload",
        files={"file": ("pic.jpg", JPEG, "image/jpeg")},
        headers=alice,
    )
    assert response.status_code == 201
    assert response.json()["type"] == "image"
    assert media_store.uploads[0][2] == "publication"

    spoofed = client.post(
        f"{API}/media/upload",
        files={"file": ("pic.png", JPEG, "image/png")},
        headers=alice,
    )
    assert spoofed.status_code == 400


def test_story_flow(client, media_store):
    alice_id, alice = register(client, "alice")
    _, bob = register(client, "bob")

    story = client.post(
        f"{API}/stories/upload",
        files={"file": ("s.jpg", JPEG, "image/jpeg")},
        headers=alice,
    )
    assert story.status_code == 201
    story_id = story.json()["id"]

    viewed = client.post(f"{API}/stories/{story_id}/view", headers=bob)
    assert viewed.json()["view_count"] == 1

    listed = client.get(f"{API}/stories/user/{alice_id}", headers=bob)
    assert [s["id"] for s in listed.json()["stories"]] == [story_id]

    assert client.delete(f"{API}/stories/{story_id}", headers=bob).status_code == 403
    assert client.delete(f"{API}/stories/{story_id}", headers=alice).status_code == 204


# ----- Admin -----

def test_admin_login(client, make_admin):
    make_admin("root_admin")
    response = client.post(f"{API}/admin/login", json={"identifier": "root_admin", "password": "adminpass123"})
    assert response.status_code == 200
    assert response.json()["admin"]["role"] == "admin"


def test_user_token_cannot_reach_admin(client):
    _, alice = register(client, "alice")
    assert client.get(f"{API}/admin/dashboard", headers=alice).status_code == 401


def test_admin_permission_is_enforced(client, make_admin):
    limited = make_admin("limited", can_manage_users=False)
    assert client.delete(f"{API}/admin/users/1", headers=admin_headers(limited)).status_code == 403


def test_admin_deletes_user_with_audit(client, make_admin, media_store, push_sink):
    admin = make_admin()
    headers = admin_headers(admin)
    bob_id, bob = register(client, "bob")
    client.post(f"{API}/posts", json={"text": "bye"}, headers=bob)

    response = client.delete(f"{API}/admin/users/{bob_id}", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["root_type"] == "user"
    assert body["deleted"]["users"] == 1
    assert body["deleted"]["posts"] == 1

    logs = client.get(f"{API}/admin/audit-logs", params={"action": "delete_user"}, headers=headers).json()
    assert logs["total"] == 1
    assert logs["logs"][0]["target_id"] == str(bob_id)

    assert client.delete(f"{API}/admin/users/{bob_id}", headers=headers).status_code == 404


def test_report_and_handle(client, make_admin):
    admin = make_admin()
    headers = admin_headers(admin)
    _, alice = register(client, "alice")

    report = client.post(f"{API}/reports", json={
        "content_id": "post123", "content_type": "post", "reason": "spam", "severity": "high",
    }, headers=alice)
    assert report.status_code == 201
    report_id = report.json()["id"]

    pending = client.get(f"{API}/admin/reports", headers=headers).json()
    assert [r["id"] for r in pending["reports"]] == [report_id]

    handled = client.post(f"{API}/admin/reports/{report_id}/handle", json={"action": "approve"}, headers=headers)
    assert handled.status_code == 200
    assert handled.json()["status"] == "resolved"
    assert handled.json()["handled_by"] == admin.id

    missing = client.post(f"{API}/admin/reports/9999/handle", json={"action": "approve"}, headers=headers)
    assert missing.status_code == 404


def test_moderation_errors(client, make_admin):
    headers = admin_headers(make_admin())
    _, alice = register(client, "alice")
    post_id = client.post(f"{API}/posts", json={"text": "spicy"}, headers=alice).json()["id"]

    bad_type = client.post(f"{API}/admin/moderate", json={
        "content_id": post_id, "content_type": "story", "action": "approve",
    }, headers=headers)
    assert bad_type.status_code == 400

    missing = client.post(f"{API}/admin/moderate", json={
        "content_id": 999, "content_type": "post", "action": "reject",
    }, headers=headers)
    assert missing.status_code == 404

    rejected = client.post(f"{API}/admin/moderate", json={
        "content_id": post_id, "content_type": "post", "action": "reject",
    }, headers=headers)
    assert rejected.status_code == 200
    assert client.get(f"{API}/posts/search", params={"q": "spicy"}, headers=alice).json()["total"] == 0


def test_admin_lists_posts(client, make_admin):
    headers = admin_headers(make_admin())
    _, alice = register(client, "alice")
    kept = client.post(f"{API}/posts", json={"text": "fine"}, headers=alice).json()["id"]
    hidden = client.post(f"{API}/posts", json={"text": "bad"}, headers=alice).json()["id"]
    client.post(f"{API}/admin/moderate", json={
        "content_id": hidden, "content_type": "post", "action": "reject",
    }, headers=headers)

    listing = client.get(f"{API}/admin/posts", headers=headers).json()
    assert {p["id"] for p in listing["posts"]} == {kept, hidden}
    rejected = client.get(f"{API}/admin/posts", params={"moderation_status": "rejected"}, headers=headers).json()
    assert [p["id"] for p in rejected["posts"]] == [hidden]
    assert client.get(f"{API}/admin/posts", params={"moderation_status": "gone"}, headers=headers).status_code == 400
    assert client.get(f"{API}/admin/posts", headers=alice).status_code == 401


def test_admin_post_listing_needs_content_permission(client, make_admin):
    limited = make_admin("limited", can_manage_content=False)
    assert client.get(f"{API}/admin/posts", headers=admin_headers(limited)).status_code == 403


def test_system_notification(client, make_admin, push_sink):
    headers = admin_headers(make_admin(can_manage_system=True))
    alice_id, alice = register(client, "alice")

    sent = client.post(f"{API}/admin/notifications/system", json={
        "recipient_ids": [alice_id, 999], "content": "Scheduled maintenance",
    }, headers=headers)
    assert sent.status_code == 201
    assert sent.json() == {"sent": 1}

    inbox = client.get(f"{API}/notifications", headers=alice).json()
    assert inbox["notifications"][0]["sender_id"] is None
    assert inbox["notifications"][0]["content"] == "Scheduled maintenance"


def test_user_headers_helper_matches_login(client, make_user):
    alice = make_user("alice")
    assert client.get(f"{API}/auth/me", headers=user_headers(alice)).json()["id"] == alice.id


# ----- Health -----

def test_health_reports_push_state(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "push_enabled": False}
