"""
Problem catalog (legacy unit, labelled by the fixed taxonomy) and per-user problem completion.
"""
import logging
import uuid
from itertools import groupby

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tracker.models.problem import Problem, ProblemCompletion
from tracker.models.types import utcnow
from tracker.models.user import User
from tracker.schemas.problem import (
    ProblemCreate,
    ProblemResponse,
    ProblemSubtopicGroup,
    ProblemToggleResponse,
    ProblemTopicGroup,
    ProblemUpdate,
    taxonomy_error,
)
from tracker.services.result import Ok, Result, conflict, invalid, not_found
from tracker.services.validation import parse_id

logger = logging.getLogger(__name__)

ORDER_TAKEN = "Another problem in this topic and subtopic already uses this order"


def _out(problem: Problem) -> ProblemResponse:
    return ProblemResponse.model_validate(problem)


def _load(db: Session, problem_id: str) -> Problem | Result:
    pid = parse_id(problem_id)
    if pid is None:
        return invalid("Invalid problem ID format")
    problem = db.query(Problem).filter(Problem.id == pid).first()
    if problem is None:
        return not_found(f"Problem not found with id of {problem_id}")
    return problem


def _order_taken(db: Session, topic: str, subtopic: str, order: int, exclude_id=None) -> bool:
    q = db.query(Problem.id).filter(Problem.topic == topic, Problem.subtopic == subtopic, Problem.order == order)
    if exclude_id is not None:
        q = q.filter(Problem.id != exclude_id)
    return q.first() is not None


def list_grouped(db: Session) -> Result:
    """Active problems grouped topic -> subtopic, each group ordered by `order`."""
    problems = (
        db.query(Problem)
        .filter(Problem.is_active.is_(True))
        .order_by(Problem.topic, Problem.subtopic, Problem.order)
        .all()
    )
    groups = []
    for topic, in_topic in groupby(problems, key=lambda p: p.topic):
        subgroups = [
            ProblemSubtopicGroup(name=sub, problems=[_out(p) for p in items])
            for sub, items in groupby(in_topic, key=lambda p: p.subtopic)
        ]
        groups.append(ProblemTopicGroup(topic=topic, subtopics=subgroups))
    return Ok(groups, "Problems retrieved successfully")


def get_problem(db: Session, problem_id: str) -> Result:
    loaded = _load(db, problem_id)
    if not isinstance(loaded, Problem):
        return loaded
    return Ok(_out(loaded), "Problem retrieved successfully")


def problems_by_topic(db: Session, topic: str) -> Result:
    """`topic` comes from the URL (e.g. 'arrays'); matched against the label with its first letter upper-cased."""
    label = topic[:1].upper() + topic[1:]
    problems = (
        db.query(Problem)
        .filter(Problem.topic == label, Problem.is_active.is_(True))
        .order_by(Problem.order)
        .all()
    )
    return Ok([_out(p) for p in problems], "Problems retrieved successfully")


def create_problem(db: Session, data: ProblemCreate) -> Result:
    if _order_taken(db, data.topic, data.subtopic, data.order):
        return conflict(ORDER_TAKEN)
    problem = Problem(
        title=data.title,
        description=data.description,
        topic=data.topic,
        subtopic=data.subtopic,
        difficulty=data.difficulty,
        youtube_link=data.youtube_link,
        leetcode_link=data.leetcode_link,
        article_link=data.article_link,
        order=data.order,
        is_active=data.is_active,
    )
    db.add(problem)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Create problem IntegrityError: %s", e)
        return conflict(ORDER_TAKEN, str(getattr(e, "orig", e)))
    db.refresh(problem)
    logger.info("Problem created: id=%s topic=%s subtopic=%s", problem.id, problem.topic, problem.subtopic)
    return Ok(_out(problem), "Problem created successfully", 201)


def update_problem(db: Session, problem_id: str, data: ProblemUpdate) -> Result:
    loaded = _load(db, problem_id)
    if not isinstance(loaded, Problem):
        return loaded
    problem = loaded
    topic = data.topic if data.topic is not None else problem.topic
    subtopic = data.subtopic if data.subtopic is not None else problem.subtopic
    order = data.order if data.order is not None else problem.order
    msg = taxonomy_error(topic, subtopic)
    if msg:
        return invalid(msg)
    if (topic, subtopic, order) != (problem.topic, problem.subtopic, problem.order) and _order_taken(
        db, topic, subtopic, order, exclude_id=problem.id
    ):
        return conflict(ORDER_TAKEN)

    problem.topic, problem.subtopic, problem.order = topic, subtopic, order
    for field in ("title", "description", "difficulty", "is_active"):
        value = getattr(data, field)
        if value is not None:
            setattr(problem, field, value)
    for field in ("youtube_link", "leetcode_link", "article_link"):
        if field in data.model_fields_set:
            setattr(problem, field, getattr(data, field))
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Update problem IntegrityError: %s", e)
        return conflict(ORDER_TAKEN, str(getattr(e, "orig", e)))
    db.refresh(problem)
    return Ok(_out(problem), "Problem updated successfully")


def delete_problem(db: Session, problem_id: str) -> Result:
    loaded = _load(db, problem_id)
    if not isinstance(loaded, Problem):
        return loaded
    pid = loaded.id
    db.query(ProblemCompletion).filter(ProblemCompletion.problem_id == pid).delete(synchronize_session=False)
    db.query(Problem).filter(Problem.id == pid).delete(synchronize_session=False)
    db.commit()
    logger.info("Problem deleted: id=%s", pid)
    return Ok(None, "Problem deleted successfully")


def _completion_count(db: Session, user: User) -> int:
    return db.query(ProblemCompletion).filter(ProblemCompletion.user_id == user.id).count()


def _find_problem_completion(db: Session, user_id: uuid.UUID, problem_id: uuid.UUID) -> ProblemCompletion | None:
    return (
        db.query(ProblemCompletion)
        .filter(ProblemCompletion.user_id == user_id, ProblemCompletion.problem_id == problem_id)
        .first()
    )


def _mark_problem_completed(db: Session, user_id: uuid.UUID, problem_id: uuid.UUID) -> bool:
    """Insert the completion row. On a primary key violation another request won: re-read the state."""
    db.add(ProblemCompletion(user_id=user_id, problem_id=problem_id, completed_at=utcnow()))
    try:
        db.commit()
        return True
    except IntegrityError:
        db.rollback()
        logger.info("Concurrent problem completion for user=%s problem=%s; re-reading state", user_id, problem_id)
        return _find_problem_completion(db, user_id, problem_id) is not None


def toggle_problem_completion(db: Session, user: User, problem_id: str) -> Result:
    """Same toggle semantics as subtopics: delete when present, insert when absent, re-read on conflict."""
    loaded = _load(db, problem_id)
    if not isinstance(loaded, Problem):
        return loaded
    pid, uid = loaded.id, user.id
    if _find_problem_completion(db, uid, pid) is not None:
        db.query(ProblemCompletion).filter(
            ProblemCompletion.user_id == uid, ProblemCompletion.problem_id == pid
        ).delete(synchronize_session=False)
        db.commit()
        is_completed = False
    else:
        is_completed = _mark_problem_completed(db, uid, pid)
    return Ok(
        ProblemToggleResponse(problem_id=pid, is_completed=is_completed, completed_count=_completion_count(db, user)),
        "Problem marked as completed" if is_completed else "Problem marked as not completed",
    )


def completed_problems(db: Session, user: User) -> Result:
    problems = (
        db.query(Problem)
        .join(ProblemCompletion, ProblemCompletion.problem_id == Problem.id)
        .filter(ProblemCompletion.user_id == user.id)
        .order_by(ProblemCompletion.completed_at, Problem.title)
        .all()
    )
    return Ok([_out(p) for p in problems], "Completed problems retrieved successfully")
