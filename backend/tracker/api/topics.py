"""
Topics API: public catalog reads, per-user dashboard (progress, toggle, completion), admin writes.
Fixed paths are declared before /{topic_id} so they are not captured as ids.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tracker.api.deps import get_current_user, get_optional_user, get_page, require_admin
from tracker.api.responses import render
from tracker.database import get_db
from tracker.models.user import User
from tracker.schemas.progress import ToggleCompletionRequest
from tracker.schemas.topic import TopicCreate, TopicUpdate
from tracker.services import progress, topics
from tracker.services.pagination import PageParams

router = APIRouter(prefix="/topics", tags=["topics"])


@router.get("")
def list_topics(search: str | None = None, params: PageParams = Depends(get_page), db: Session = Depends(get_db)):
    return render(topics.list_topics(db, params, search))


@router.get("/search")
def search_topics(q: str = "", params: PageParams = Depends(get_page), db: Session = Depends(get_db)):
    return render(topics.search_topics(db, q, params))


@router.get("/progress")
def get_progress(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Per-difficulty completion for the current user."""
    return render(progress.progress_result(db, current_user))


@router.get("/all")
def all_topics_with_subtopics(
    current_user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Active topics with subtopics; isCompleted reflects the caller (false when anonymous)."""
    return render(progress.get_all_topics_with_subtopics(db, current_user))


@router.post("/toggle-complete")
def toggle_complete(
    data: ToggleCompletionRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return render(progress.toggle_completion(db, current_user, data.subtopic_id))


@router.get("/completed/{subtopic_id}")
def completion_status(subtopic_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return render(progress.get_completion_status(db, current_user, subtopic_id))


@router.get("/slug/{slug}")
def get_topic_by_slug(slug: str, db: Session = Depends(get_db)):
    return render(topics.get_topic_by_slug(db, slug))


@router.get("/{topic_id}")
def get_topic(topic_id: str, db: Session = Depends(get_db)):
    return render(topics.get_topic(db, topic_id))


@router.post("")
def create_topic(data: TopicCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return render(topics.create_topic(db, data))


@router.put("/{topic_id}")
def update_topic(topic_id: str, data: TopicUpdate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return render(topics.update_topic(db, topic_id, data))


@router.delete("/{topic_id}")
def delete_topic(topic_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Deletes the topic, its subtopics and their completion records."""
    return render(topics.delete_topic(db, topic_id))
