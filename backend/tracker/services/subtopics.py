"""
Subtopic catalog: CRUD, filtered listing, search and the catalog-level status flag.
Per-user completion is handled in tracker.services.progress.
"""
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from tracker.models.completed_problem import CompletedProblem
from tracker.models.subtopic import Subtopic
from tracker.models.topic import Topic
from tracker.schemas.subtopic import SubtopicCreate, SubtopicResponse, SubtopicUpdate
from tracker.services.pagination import PageParams, page_payload, paginate
from tracker.services.result import Ok, Result, conflict, invalid, not_found
from tracker.services.slugs import unique_slug
from tracker.services.validation import csv_values, like_pattern, parse_id

logger = logging.getLogger(__name__)

NAME_TAKEN = "Subtopic with this name already exists for the selected topic"
ORDER_TAKEN = "Another subtopic in this topic already uses this order"
SLUG_TAKEN = "Another subtopic already uses this slug"


def _out(subtopic: Subtopic) -> SubtopicResponse:
    return SubtopicResponse.model_validate(subtopic)


def _base_query(db: Session):
    return db.query(Subtopic).options(joinedload(Subtopic.topic))


def _load(db: Session, subtopic_id: str) -> Subtopic | Result:
    sid = parse_id(subtopic_id)
    if sid is None:
        return invalid("Invalid subtopic ID format")
    subtopic = _base_query(db).filter(Subtopic.id == sid).first()
    if subtopic is None:
        return not_found("Subtopic not found")
    return subtopic


def _conflicts(db: Session, topic_id, name: str | None, order: int | None, exclude_id=None) -> Result | None:
    if name is not None:
        q = db.query(Subtopic.id).filter(Subtopic.topic_id == topic_id, Subtopic.name == name)
        if exclude_id is not None:
            q = q.filter(Subtopic.id != exclude_id)
        if q.first() is not None:
            return conflict(NAME_TAKEN)
    if order is not None:
        q = db.query(Subtopic.id).filter(Subtopic.topic_id == topic_id, Subtopic.order == order)
        if exclude_id is not None:
            q = q.filter(Subtopic.id != exclude_id)
        if q.first() is not None:
            return conflict(ORDER_TAKEN)
    return None


def _integrity_conflict(e: IntegrityError) -> Result:
    """Map a uniqueness violation to the message for the constraint that fired."""
    detail = str(getattr(e, "orig", e))
    if "sort_order" in detail or "uq_subtopics_topic_order" in detail:
        return conflict(ORDER_TAKEN, detail)
    if "slug" in detail:
        return conflict(SLUG_TAKEN, detail)
    return conflict(NAME_TAKEN, detail)


def _apply_filters(q, difficulty: str | None = None, status: str | None = None):
    """Comma-separated difficulty/status lists; unknown values match nothing."""
    if difficulty:
        q = q.filter(Subtopic.difficulty.in_(csv_values(difficulty)))
    if status:
        q = q.filter(Subtopic.status.in_(csv_values(status)))
    return q


def _text_filter(q, term: str | None):
    if term and term.strip():
        pattern = like_pattern(term.strip())
        q = q.filter(
            or_(Subtopic.name.ilike(pattern, escape="\\"), Subtopic.description.ilike(pattern, escape="\\"))
        )
    return q


def list_subtopics(
    db: Session,
    params: PageParams,
    search: str | None = None,
    topic: str | None = None,
    difficulty: str | None = None,
    status: str | None = None,
) -> Result:
    q = _text_filter(_base_query(db), search)
    if topic:
        tid = parse_id(topic)
        if tid is None:
            return invalid("Invalid topic ID format")
        q = q.filter(Subtopic.topic_id == tid)
    q = _apply_filters(q, difficulty, status).order_by(Subtopic.order, Subtopic.name)
    items, meta = paginate(q, params)
    return Ok(page_payload([_out(s) for s in items], meta), "Subtopics retrieved successfully")


def search_subtopics(
    db: Session,
    query: str,
    params: PageParams,
    difficulty: str | None = None,
    topic: str | None = None,
) -> Result:
    result = list_subtopics(db, params, search=query, topic=topic, difficulty=difficulty)
    if not result.ok:
        return result
    return Ok(result.data, "Subtopics search results")


def subtopics_by_topic(
    db: Session,
    topic_id: str,
    params: PageParams,
    difficulty: str | None = None,
    status: str | None = None,
) -> Result:
    tid = parse_id(topic_id)
    if tid is None:
        return invalid("Invalid topic ID format")
    q = _apply_filters(_base_query(db).filter(Subtopic.topic_id == tid), difficulty, status)
    items, meta = paginate(q.order_by(Subtopic.order), params)
    return Ok(page_payload([_out(s) for s in items], meta), "Subtopics retrieved successfully")


def completed_subtopics(db: Session, params: PageParams) -> Result:
    """Subtopics whose catalog status is 'completed', grouped by topic name then order."""
    q = (
        _base_query(db)
        .join(Topic, Subtopic.topic_id == Topic.id)
        .filter(Subtopic.status == "completed")
        .order_by(Topic.name, Subtopic.order)
    )
    items, meta = paginate(q, params)
    return Ok(page_payload([_out(s) for s in items], meta), "Completed subtopics retrieved successfully")


def get_subtopic(db: Session, subtopic_id: str) -> Result:
    loaded = _load(db, subtopic_id)
    if not isinstance(loaded, Subtopic):
        return loaded
    return Ok(_out(loaded), "Subtopic retrieved successfully")


def create_subtopic(db: Session, data: SubtopicCreate) -> Result:
    tid = parse_id(data.topic_id)
    if tid is None:
        return invalid("Invalid topic ID format")
    if db.query(Topic.id).filter(Topic.id == tid).first() is None:
        return not_found("Topic not found")
    err = _conflicts(db, tid, data.name, data.order)
    if err:
        return err
    subtopic = Subtopic(
        topic_id=tid,
        name=data.name,
        slug=unique_slug(db, Subtopic, data.name, fallback="subtopic"),
        description=data.description,
        difficulty=data.difficulty,
        order=data.order,
        status=data.status,
        youtube_link=data.youtube_link,
        leetcode_link=data.leetcode_link,
        article_link=data.article_link,
    )
    db.add(subtopic)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Create subtopic IntegrityError: %s", e)
        return _integrity_conflict(e)
    logger.info("Subtopic created: id=%s topic=%s slug=%s", subtopic.id, tid, subtopic.slug)
    return Ok(_out(_base_query(db).filter(Subtopic.id == subtopic.id).one()), "Subtopic created successfully", 201)


def update_subtopic(db: Session, subtopic_id: str, data: SubtopicUpdate) -> Result:
    loaded = _load(db, subtopic_id)
    if not isinstance(loaded, Subtopic):
        return loaded
    subtopic = loaded
    fields = data.model_fields_set

    target_topic = subtopic.topic_id
    if data.topic_id is not None:
        target_topic = parse_id(data.topic_id)
        if target_topic is None:
            return invalid("Invalid topic ID format")
        if db.query(Topic.id).filter(Topic.id == target_topic).first() is None:
            return not_found("Topic not found")

    name_changed = data.name is not None and data.name != subtopic.name
    moved = target_topic != subtopic.topic_id
    new_order = data.order if data.order is not None else subtopic.order
    err = _conflicts(
        db,
        target_topic,
        data.name if name_changed else (subtopic.name if moved else None),
        new_order if (data.order is not None or moved) else None,
        exclude_id=subtopic.id,
    )
    if err:
        return err

    if name_changed:
        subtopic.name = data.name
        subtopic.slug = unique_slug(db, Subtopic, data.name, exclude_id=subtopic.id, fallback="subtopic")
    subtopic.topic_id = target_topic
    if data.difficulty is not None:
        subtopic.difficulty = data.difficulty
    if data.order is not None:
        subtopic.order = data.order
    if data.status is not None:
        subtopic.status = data.status
    # description and links may be cleared by sending null
    for field in ("description", "youtube_link", "leetcode_link", "article_link"):
        if field in fields:
            setattr(subtopic, field, getattr(data, field))
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Update subtopic IntegrityError: %s", e)
        return _integrity_conflict(e)
    db.expire_all()
    return Ok(_out(_base_query(db).filter(Subtopic.id == subtopic.id).one()), "Subtopic updated successfully")


def update_subtopic_status(db: Session, subtopic_id: str, status: str) -> Result:
    loaded = _load(db, subtopic_id)
    if not isinstance(loaded, Subtopic):
        return loaded
    loaded.status = status
    db.commit()
    db.refresh(loaded)
    return Ok(_out(loaded), "Subtopic status updated successfully")


def delete_subtopic(db: Session, subtopic_id: str) -> Result:
    loaded = _load(db, subtopic_id)
    if not isinstance(loaded, Subtopic):
        return loaded
    sid = loaded.id
    db.query(CompletedProblem).filter(CompletedProblem.subtopic_id == sid).delete(synchronize_session=False)
    db.query(Subtopic).filter(Subtopic.id == sid).delete(synchronize_session=False)
    db.commit()
    logger.info("Subtopic deleted: id=%s", sid)
    return Ok(None, "Subtopic deleted successfully")
