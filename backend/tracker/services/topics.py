"""
Topic catalog: CRUD, slug lookup, search and listing.
Deleting a topic cascades: its subtopics and every completion record for them go with it.
"""
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tracker.models.completed_problem import CompletedProblem
from tracker.models.subtopic import Subtopic
from tracker.models.topic import Topic
from tracker.schemas.topic import TopicCreate, TopicResponse, TopicUpdate
from tracker.services.pagination import PageParams, page_payload, paginate
from tracker.services.result import Ok, Result, conflict, invalid, not_found
from tracker.services.slugs import unique_slug
from tracker.services.validation import like_pattern, parse_id

logger = logging.getLogger(__name__)

NAME_TAKEN = "Topic with this name already exists"


def _out(topic: Topic) -> TopicResponse:
    return TopicResponse.model_validate(topic)


def _name_taken(db: Session, name: str, exclude_id=None) -> bool:
    q = db.query(Topic.id).filter(Topic.name == name)
    if exclude_id is not None:
        q = q.filter(Topic.id != exclude_id)
    return q.first() is not None


def _text_filter(q, term: str | None):
    if term and term.strip():
        pattern = like_pattern(term.strip())
        q = q.filter(or_(Topic.name.ilike(pattern, escape="\\"), Topic.description.ilike(pattern, escape="\\")))
    return q


def list_topics(db: Session, params: PageParams, search: str | None = None) -> Result:
    q = _text_filter(db.query(Topic), search).order_by(Topic.name)
    topics, meta = paginate(q, params)
    return Ok(page_payload([_out(t) for t in topics], meta), "Topics retrieved successfully")


def search_topics(db: Session, query: str, params: PageParams) -> Result:
    """Case-insensitive substring match over name and description; empty query lists everything."""
    q = _text_filter(db.query(Topic), query).order_by(Topic.name)
    topics, meta = paginate(q, params)
    return Ok(page_payload([_out(t) for t in topics], meta), "Topics search results")


def get_topic(db: Session, topic_id: str) -> Result:
    tid = parse_id(topic_id)
    if tid is None:
        return invalid("Invalid topic ID format")
    topic = db.query(Topic).filter(Topic.id == tid).first()
    if topic is None:
        return not_found("Topic not found")
    return Ok(_out(topic), "Topic retrieved successfully")


def get_topic_by_slug(db: Session, slug: str) -> Result:
    topic = db.query(Topic).filter(Topic.slug == slug).first()
    if topic is None:
        return not_found("Topic not found")
    return Ok(_out(topic), "Topic retrieved successfully")


def create_topic(db: Session, data: TopicCreate) -> Result:
    if _name_taken(db, data.name):
        return conflict(NAME_TAKEN)
    topic = Topic(
        name=data.name,
        description=data.description,
        slug=unique_slug(db, Topic, data.name, fallback="topic"),
    )
    db.add(topic)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Create topic IntegrityError: %s", e)
        return conflict(NAME_TAKEN, str(getattr(e, "orig", e)))
    db.refresh(topic)
    logger.info("Topic created: id=%s slug=%s", topic.id, topic.slug)
    return Ok(_out(topic), "Topic created successfully", 201)


def update_topic(db: Session, topic_id: str, data: TopicUpdate) -> Result:
    """Name uniqueness is re-checked and the slug recomputed only when the name changes."""
    tid = parse_id(topic_id)
    if tid is None:
        return invalid("Invalid topic ID format")
    topic = db.query(Topic).filter(Topic.id == tid).first()
    if topic is None:
        return not_found("Topic not found")
    if data.name is not None and data.name != topic.name:
        if _name_taken(db, data.name, exclude_id=topic.id):
            return conflict(NAME_TAKEN)
        topic.name = data.name
        topic.slug = unique_slug(db, Topic, data.name, exclude_id=topic.id, fallback="topic")
    if data.description is not None:
        topic.description = data.description
    if data.is_active is not None:
        topic.is_active = data.is_active
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Update topic IntegrityError: %s", e)
        return conflict(NAME_TAKEN, str(getattr(e, "orig", e)))
    db.refresh(topic)
    return Ok(_out(topic), "Topic updated successfully")


def delete_topic(db: Session, topic_id: str) -> Result:
    tid = parse_id(topic_id)
    if tid is None:
        return invalid("Invalid topic ID format")
    topic = db.query(Topic).filter(Topic.id == tid).first()
    if topic is None:
        return not_found("Topic not found")
    subtopic_ids = [row[0] for row in db.query(Subtopic.id).filter(Subtopic.topic_id == tid).all()]
    if subtopic_ids:
        db.query(CompletedProblem).filter(CompletedProblem.subtopic_id.in_(subtopic_ids)).delete(
            synchronize_session=False
        )
        db.query(Subtopic).filter(Subtopic.topic_id == tid).delete(synchronize_session=False)
    db.query(Topic).filter(Topic.id == tid).delete(synchronize_session=False)
    db.commit()
    logger.info("Topic deleted: id=%s subtopics=%d", tid, len(subtopic_ids))
    message = (
        "Topic and all associated data deleted successfully" if subtopic_ids else "Topic deleted successfully"
    )
    return Ok(None, message)
