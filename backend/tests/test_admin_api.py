"""
API tests for admin user management and dashboard statistics under /auth/admin.
"""
import uuid
from datetime import date

from tracker.models.user import User
from tracker.schemas.auth import UserUpdateRequest
from tracker.services import identity

from conftest import API, bearer, create_subtopic, create_topic, register


def test_admin_routes_forbidden_for_users(client, user_headers):
    for method, path in (
        ("get", "/auth/admin/users"),
        ("get", "/auth/admin/dashboard-stats"),
        ("delete", "/auth/admin/delete-user/00000000-0000-0000-0000-000000000000"),
    ):
        r = getattr(client, method)(f"{API}{path}", headers=user_headers)
        assert r.status_code == 403, path
        assert r.json()["success"] is False


def test_admin_routes_require_token(client):
    r = client.get(f"{API}/auth/admin/users")
    assert r.status_code == 401


def test_list_users_paginated_and_searchable(client, admin_headers):
    for i in range(3):
        register(client, name=f"Learner {i}", email=f"learner{i}@example.com")
    r = client.get(f"{API}/auth/admin/users", params={"limit": 2}, headers=admin_headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert len(data["items"]) == 2
    assert data["pagination"] == {"page": 1, "limit": 2, "totalPages": 2, "total": 4}

    r = client.get(f"{API}/auth/admin/users", params={"search": "LEARNER1"}, headers=admin_headers)
    items = r.json()["data"]["items"]
    assert [u["email"] for u in items] == ["learner1@example.com"]


def test_update_user_details_and_role(client, user, admin_headers):
    uid = user["user"]["id"]
    r = client.put(
        f"{API}/auth/admin/update-details/{uid}",
        json={"name": "Ada L.", "role": "admin", "password": "ignored"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["name"] == "Ada L."
    assert data["role"] == "admin"


def test_update_user_email_conflict(client, user, admin, admin_headers):
    r = client.put(
        f"{API}/auth/admin/update-details/{user['user']['id']}",
        json={"email": "ROOT@example.com"},
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Email already in use"


def test_update_user_bad_and_unknown_id(client, admin_headers):
    r = client.put(f"{API}/auth/admin/update-details/nope", json={"name": "X"}, headers=admin_headers)
    assert r.status_code == 400
    r = client.put(
        f"{API}/auth/admin/update-details/00000000-0000-0000-0000-000000000000",
        json={"name": "X"},
        headers=admin_headers,
    )
    assert r.status_code == 404


def test_delete_user_removes_completions(client, admin_headers, catalog):
    learner = register(client, email="gone@example.com")
    sub_id = catalog["subtopics"][0]["id"]
    client.post(f"{API}/topics/toggle-complete", json={"subtopicId": sub_id}, headers=bearer(learner["token"]))

    r = client.delete(f"{API}/auth/admin/delete-user/{learner['user']['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["email"] == "gone@example.com"

    stats = client.get(f"{API}/auth/admin/dashboard-stats", headers=admin_headers).json()["data"]
    assert stats["progress"]["totalCompleted"] == 0
    assert client.get(f"{API}/auth/me", headers=bearer(learner["token"])).status_code == 401


def test_dashboard_stats(client, admin_headers, catalog):
    a = register(client, email="a@example.com")
    b = register(client, email="b@example.com")
    subs = catalog["subtopics"]
    for sub in subs[:3]:
        client.post(f"{API}/topics/toggle-complete", json={"subtopicId": sub["id"]}, headers=bearer(a["token"]))
    client.post(f"{API}/topics/toggle-complete", json={"subtopicId": subs[3]["id"]}, headers=bearer(b["token"]))

    r = client.get(f"{API}/auth/admin/dashboard-stats", headers=admin_headers)
    assert r.status_code == 200
    stats = r.json()["data"]

    assert stats["users"]["total"] == 2
    assert stats["users"]["newThisWeek"] == 2
    assert stats["users"]["activeToday"] == 2
    assert stats["topics"]["total"] == 2
    assert stats["topics"]["subtopics"] == 4
    assert stats["topics"]["completionRate"] == 100.0
    assert stats["progress"] == {"totalCompleted": 4, "averagePerUser": 2.0, "maxCompleted": 3}

    top = stats["topTopics"]
    assert [t["topicName"] for t in top] == ["Arrays", "Graphs"]
    assert [t["completedCount"] for t in top] == [3, 1]

    activity = stats["recentActivity"]
    assert len(activity) == 1
    assert activity[0]["count"] == 4
    date.fromisoformat(activity[0]["date"])


def test_dashboard_stats_empty(client, admin_headers):
    stats = client.get(f"{API}/auth/admin/dashboard-stats", headers=admin_headers).json()["data"]
    assert stats["topics"]["completionRate"] == 0.0
    assert stats["progress"]["averagePerUser"] == 0.0
    assert stats["topTopics"] == []
    assert stats["recentActivity"] == []


def test_new_topic_without_completions_not_in_top_topics(client, admin_headers, catalog):
    create_topic(client, admin_headers, "Heaps")
    learner = register(client)
    create_subtopic(client, admin_headers, catalog["graphs"]["id"], "DFS", "medium", 1)
    client.post(
        f"{API}/topics/toggle-complete",
        json={"subtopicId": catalog["subtopics"][3]["id"]},
        headers=bearer(learner["token"]),
    )
    stats = client.get(f"{API}/auth/admin/dashboard-stats", headers=admin_headers).json()["data"]
    assert [t["topicName"] for t in stats["topTopics"]] == ["Graphs"]


def test_role_change_from_non_admin_actor_is_ignored(db, user, admin):
    """Called directly, the service still applies only an admin's role change."""
    actor = db.query(User).filter(User.id == uuid.UUID(user["user"]["id"])).one()
    result = identity.update_user(
        db, actor, admin["user"]["id"], UserUpdateRequest(name="Renamed", role="user")
    )
    assert result.ok
    assert result.data.name == "Renamed"
    assert result.data.role == "admin"
