"""
Completion toggle and progress: per-difficulty buckets, toggle involution, completion status,
and reconciliation when a concurrent request inserts the same completion first.
"""
import uuid

import pytest

from tracker.models.completed_problem import CompletedProblem
from tracker.models.types import utcnow
from tracker.services import progress
from tracker.services.progress import percentage

from conftest import API, bearer, register


def _toggle(client, headers, subtopic_id):
    return client.post(f"{API}/topics/toggle-complete", json={"subtopicId": subtopic_id}, headers=headers)


@pytest.mark.parametrize(
    "completed,total,expected",
    [(0, 0, 0), (0, 3, 0), (1, 3, 33), (2, 3, 67), (1, 2, 50), (1, 8, 13), (3, 3, 100)],
)
def test_percentage_rounds_half_up(completed, total, expected):
    assert percentage(completed, total) == expected


def test_progress_empty_catalog(client, user_headers):
    r = client.get(f"{API}/topics/progress", headers=user_headers)
    assert r.status_code == 200
    zero = {"completed": 0, "total": 0, "percentage": 0}
    assert r.json()["data"] == {"easy": zero, "medium": zero, "tough": zero, "overall": zero}


def test_progress_requires_token(client):
    assert client.get(f"{API}/topics/progress").status_code == 401


def test_toggle_marks_and_unmarks(client, user_headers, catalog):
    sub = catalog["subtopics"][0]
    r = _toggle(client, user_headers, sub["id"])
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Subtopic marked as completed"
    data = body["data"]
    assert data["subtopicId"] == sub["id"]
    assert data["isCompleted"] is True
    assert data["progress"]["easy"] == {"completed": 1, "total": 2, "percentage": 50}
    assert data["progress"]["overall"] == {"completed": 1, "total": 4, "percentage": 25}

    r = _toggle(client, user_headers, sub["id"])
    data = r.json()["data"]
    assert data["isCompleted"] is False
    assert data["progress"]["overall"]["completed"] == 0


def test_toggle_is_an_involution(client, user_headers, catalog):
    """Toggling twice restores both the completion state and the progress snapshot."""
    before = client.get(f"{API}/topics/progress", headers=user_headers).json()["data"]
    sub_id = catalog["subtopics"][2]["id"]
    _toggle(client, user_headers, sub_id)
    _toggle(client, user_headers, sub_id)
    after = client.get(f"{API}/topics/progress", headers=user_headers).json()["data"]
    assert after == before
    status = client.get(f"{API}/topics/completed/{sub_id}", headers=user_headers).json()["data"]
    assert status["isCompleted"] is False


def test_buckets_add_up(client, user_headers, catalog):
    for sub in catalog["subtopics"][1:]:
        _toggle(client, user_headers, sub["id"])
    stats = client.get(f"{API}/topics/progress", headers=user_headers).json()["data"]
    buckets = [stats[d] for d in ("easy", "medium", "tough")]
    assert sum(b["completed"] for b in buckets) == stats["overall"]["completed"] == 3
    assert sum(b["total"] for b in buckets) == stats["overall"]["total"] == 4
    for b in buckets + [stats["overall"]]:
        assert 0 <= b["completed"] <= b["total"]
        assert 0 <= b["percentage"] <= 100
    assert stats["overall"]["percentage"] == 75


def test_progress_is_per_user(client, user_headers, catalog):
    other = register(client, email="other@example.com")
    _toggle(client, user_headers, catalog["subtopics"][0]["id"])
    theirs = client.get(f"{API}/topics/progress", headers=bearer(other["token"])).json()["data"]
    assert theirs["overall"]["completed"] == 0


def test_toggle_bad_and_unknown_id(client, user_headers):
    r = _toggle(client, user_headers, "not-a-uuid")
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid subtopic ID"

    r = client.post(f"{API}/topics/toggle-complete", json={}, headers=user_headers)
    assert r.status_code == 400

    r = _toggle(client, user_headers, str(uuid.uuid4()))
    assert r.status_code == 404
    assert r.json()["message"] == "Subtopic not found"


def test_toggle_requires_token(client, catalog):
    r = client.post(f"{API}/topics/toggle-complete", json={"subtopicId": catalog["subtopics"][0]["id"]})
    assert r.status_code == 401


def test_completion_status(client, user_headers, catalog):
    sub_id = catalog["subtopics"][0]["id"]
    r = client.get(f"{API}/topics/completed/{sub_id}", headers=user_headers)
    assert r.json()["data"] == {"subtopicId": sub_id, "isCompleted": False, "completedAt": None}

    _toggle(client, user_headers, sub_id)
    data = client.get(f"{API}/topics/completed/{sub_id}", headers=user_headers).json()["data"]
    assert data["isCompleted"] is True
    assert data["completedAt"]

    assert client.get(f"{API}/topics/completed/zzz", headers=user_headers).status_code == 400


def test_concurrent_insert_is_reconciled(db, user, catalog):
    """An insert that loses the race to another request reports the row that now exists."""
    uid = uuid.UUID(user["user"]["id"])
    sid = uuid.UUID(catalog["subtopics"][0]["id"])
    db.add(CompletedProblem(user_id=uid, subtopic_id=sid, completed_at=utcnow()))
    db.commit()

    assert progress._mark_completed(db, uid, sid) is True
    assert db.query(CompletedProblem).filter(CompletedProblem.user_id == uid).count() == 1


def test_toggle_after_concurrent_insert_unmarks(client, db, user, user_headers, catalog):
    """If another request already completed the subtopic, the next toggle removes it."""
    uid = uuid.UUID(user["user"]["id"])
    sid = catalog["subtopics"][0]["id"]
    db.add(CompletedProblem(user_id=uid, subtopic_id=uuid.UUID(sid), completed_at=utcnow()))
    db.commit()
    r = _toggle(client, user_headers, sid)
    assert r.json()["data"]["isCompleted"] is False
