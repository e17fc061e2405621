"""
API tests for problems router: taxonomy validation, grouping, per-user completion toggle.
"""
import uuid

from tracker.models.problem import ProblemCompletion
from tracker.models.types import utcnow
from tracker.services import problems

from conftest import API, bearer, register


def _problem(client, headers, title, topic="Arrays", subtopic="Two Pointers", order=1, **extra):
    body = {"title": title, "description": f"{title} description", "topic": topic, "subtopic": subtopic, "order": order}
    body.update(extra)
    r = client.post(f"{API}/problems", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_create_problem_and_get(client, admin_headers, user_headers):
    p = _problem(client, admin_headers, "Pair Sum", difficulty="Easy", leetcodeLink="https://leetcode.com/problems/two-sum/")
    assert p["difficulty"] == "Easy"
    assert p["isActive"] is True
    r = client.get(f"{API}/problems/{p['id']}", headers=user_headers)
    assert r.status_code == 200
    assert r.json()["data"]["title"] == "Pair Sum"


def test_create_problem_outside_taxonomy(client, admin_headers):
    base = {"title": "X", "description": "d", "order": 1}
    r = client.post(f"{API}/problems", json={**base, "topic": "Cooking", "subtopic": "Soup"}, headers=admin_headers)
    assert r.status_code == 400
    assert "not a valid topic" in r.json()["message"]
    r = client.post(f"{API}/problems", json={**base, "topic": "Arrays", "subtopic": "BFS"}, headers=admin_headers)
    assert r.status_code == 400
    assert "not a valid subtopic" in r.json()["message"]


def test_create_problem_requires_admin(client, user_headers):
    r = client.post(
        f"{API}/problems",
        json={"title": "X", "description": "d", "topic": "Arrays", "subtopic": "Hashing", "order": 1},
        headers=user_headers,
    )
    assert r.status_code == 403


def test_order_unique_within_topic_and_subtopic(client, admin_headers):
    _problem(client, admin_headers, "First", order=1)
    r = client.post(
        f"{API}/problems",
        json={"title": "Second", "description": "d", "topic": "Arrays", "subtopic": "Two Pointers", "order": 1},
        headers=admin_headers,
    )
    assert r.status_code == 400
    _problem(client, admin_headers, "Other subtopic", subtopic="Hashing", order=1)


def test_list_grouped_by_topic_and_subtopic(client, admin_headers, user_headers):
    _problem(client, admin_headers, "B", order=2)
    _problem(client, admin_headers, "A", order=1)
    _problem(client, admin_headers, "H", subtopic="Hashing", order=1)
    _problem(client, admin_headers, "G", topic="Graphs", subtopic="BFS/DFS", order=1)
    _problem(client, admin_headers, "Hidden", subtopic="Hashing", order=2, isActive=False)

    r = client.get(f"{API}/problems", headers=user_headers)
    assert r.status_code == 200
    groups = r.json()["data"]
    assert [g["topic"] for g in groups] == ["Arrays", "Graphs"]
    arrays = groups[0]["subtopics"]
    assert [s["name"] for s in arrays] == ["Hashing", "Two Pointers"]
    assert [p["title"] for p in arrays[0]["problems"]] == ["H"]
    assert [p["title"] for p in arrays[1]["problems"]] == ["A", "B"]


def test_problems_by_topic_capitalizes(client, admin_headers, user_headers):
    _problem(client, admin_headers, "A")
    _problem(client, admin_headers, "G", topic="Graphs", subtopic="BFS/DFS")
    r = client.get(f"{API}/problems/topic/arrays", headers=user_headers)
    assert [p["title"] for p in r.json()["data"]] == ["A"]


def test_update_problem(client, admin_headers):
    p = _problem(client, admin_headers, "A")
    r = client.put(f"{API}/problems/{p['id']}", json={"title": "A2", "difficulty": "Hard"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["title"] == "A2"
    assert r.json()["data"]["difficulty"] == "Hard"

    r = client.put(f"{API}/problems/{p['id']}", json={"subtopic": "Topological Sort"}, headers=admin_headers)
    assert r.status_code == 400


def test_problem_bad_and_missing_id(client, user_headers):
    assert client.get(f"{API}/problems/abc", headers=user_headers).status_code == 400
    assert client.get(f"{API}/problems/{uuid.uuid4()}", headers=user_headers).status_code == 404


def test_toggle_problem_completion(client, admin_headers, user_headers):
    p = _problem(client, admin_headers, "A")
    q = _problem(client, admin_headers, "B", order=2)

    r = client.put(f"{API}/problems/{p['id']}/complete", headers=user_headers)
    assert r.status_code == 200
    assert r.json()["data"] == {"problemId": p["id"], "isCompleted": True, "completedCount": 1}
    client.put(f"{API}/problems/{q['id']}/complete", headers=user_headers)

    done = client.get(f"{API}/problems/completed", headers=user_headers).json()["data"]
    assert [d["title"] for d in done] == ["A", "B"]

    r = client.put(f"{API}/problems/{p['id']}/complete", headers=user_headers)
    assert r.json()["data"]["isCompleted"] is False
    assert r.json()["data"]["completedCount"] == 1


def test_problem_completion_is_per_user(client, admin_headers, user_headers):
    p = _problem(client, admin_headers, "A")
    client.put(f"{API}/problems/{p['id']}/complete", headers=user_headers)
    other = register(client, email="other@example.com")
    done = client.get(f"{API}/problems/completed", headers=bearer(other["token"])).json()["data"]
    assert done == []


def test_delete_problem(client, admin_headers, user_headers):
    p = _problem(client, admin_headers, "A")
    client.put(f"{API}/problems/{p['id']}/complete", headers=user_headers)
    r = client.delete(f"{API}/problems/{p['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert client.get(f"{API}/problems/completed", headers=user_headers).json()["data"] == []
    assert client.get(f"{API}/problems/{p['id']}", headers=user_headers).status_code == 404


def test_concurrent_problem_completion_is_reconciled(client, db, admin_headers, user):
    """An insert that loses the race to another request reports the completion that now exists."""
    p = _problem(client, admin_headers, "A")
    uid, pid = uuid.UUID(user["user"]["id"]), uuid.UUID(p["id"])
    db.add(ProblemCompletion(user_id=uid, problem_id=pid, completed_at=utcnow()))
    db.commit()

    assert problems._mark_problem_completed(db, uid, pid) is True
    assert db.query(ProblemCompletion).filter(ProblemCompletion.user_id == uid).count() == 1
