"""
Problems API (legacy catalog). Reads and completion toggle require a session; writes require an admin.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tracker.api.deps import get_current_user, require_admin
from tracker.api.responses import render
from tracker.database import get_db
from tracker.models.user import User
from tracker.schemas.problem import ProblemCreate, ProblemUpdate
from tracker.services import problems

router = APIRouter(prefix="/problems", tags=["problems"])


@router.get("")
def list_problems(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Active problems grouped by topic and subtopic."""
    return render(problems.list_grouped(db))


@router.get("/completed")
def completed_problems(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return render(problems.completed_problems(db, current_user))


@router.get("/topic/{topic}")
def problems_by_topic(topic: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return render(problems.problems_by_topic(db, topic))


@router.get("/{problem_id}")
def get_problem(problem_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return render(problems.get_problem(db, problem_id))


@router.post("")
def create_problem(data: ProblemCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return render(problems.create_problem(db, data))


@router.put("/{problem_id}/complete")
def toggle_complete(problem_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return render(problems.toggle_problem_completion(db, current_user, problem_id))


@router.put("/{problem_id}")
def update_problem(
    problem_id: str,
    data: ProblemUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return render(problems.update_problem(db, problem_id, data))


@router.delete("/{problem_id}")
def delete_problem(problem_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return render(problems.delete_problem(db, problem_id))
