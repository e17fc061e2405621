"""
Subtopics API. Reads require a session; catalog writes require an admin.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tracker.api.deps import get_current_user, get_page, require_admin
from tracker.api.responses import render
from tracker.database import get_db
from tracker.models.user import User
from tracker.schemas.subtopic import SubtopicCreate, SubtopicStatusUpdate, SubtopicUpdate
from tracker.services import subtopics
from tracker.services.pagination import PageParams

router = APIRouter(prefix="/subtopics", tags=["subtopics"])


@router.get("")
def list_subtopics(
    search: str | None = None,
    topic: str | None = None,
    difficulty: str | None = None,
    status: str | None = None,
    params: PageParams = Depends(get_page),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Filters: difficulty and status take comma-separated lists."""
    return render(subtopics.list_subtopics(db, params, search, topic, difficulty, status))


@router.get("/search")
def search_subtopics(
    q: str = "",
    difficulty: str | None = None,
    topic: str | None = None,
    params: PageParams = Depends(get_page),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return render(subtopics.search_subtopics(db, q, params, difficulty, topic))


@router.get("/completed")
def completed_subtopics(
    params: PageParams = Depends(get_page),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return render(subtopics.completed_subtopics(db, params))


@router.get("/topic/{topic_id}")
def subtopics_by_topic(
    topic_id: str,
    difficulty: str | None = None,
    status: str | None = None,
    params: PageParams = Depends(get_page),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return render(subtopics.subtopics_by_topic(db, topic_id, params, difficulty, status))


@router.get("/{subtopic_id}")
def get_subtopic(subtopic_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return render(subtopics.get_subtopic(db, subtopic_id))


@router.post("")
def create_subtopic(data: SubtopicCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return render(subtopics.create_subtopic(db, data))


@router.put("/{subtopic_id}/status")
def update_status(
    subtopic_id: str,
    data: SubtopicStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return render(subtopics.update_subtopic_status(db, subtopic_id, data.status))


@router.put("/{subtopic_id}")
def update_subtopic(
    subtopic_id: str,
    data: SubtopicUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return render(subtopics.update_subtopic(db, subtopic_id, data))


@router.delete("/{subtopic_id}")
def delete_subtopic(subtopic_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return render(subtopics.delete_subtopic(db, subtopic_id))
