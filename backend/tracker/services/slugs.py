"""
URL-safe slugs for topics and subtopics.
Collisions (excluding the row being saved) get a numeric suffix: graph-theory, graph-theory-1, ...
"""
import re
import unicodedata
import uuid

from sqlalchemy.orm import Session


def slugify(value: str) -> str:
    """Lowercase, transliterate to ASCII, collapse everything else to single hyphens."""
    if not value:
        return ""
    ascii_text = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")


def unique_slug(db: Session, model, name: str, exclude_id: uuid.UUID | None = None, fallback: str = "item") -> str:
    """First free slug for `name` in `model`'s slug column."""
    base = slugify(name) or fallback
    slug = base
    count = 1
    while _slug_taken(db, model, slug, exclude_id):
        slug = f"{base}-{count}"
        count += 1
    return slug


def _slug_taken(db: Session, model, slug: str, exclude_id: uuid.UUID | None) -> bool:
    q = db.query(model.id).filter(model.slug == slug)
    if exclude_id is not None:
        q = q.filter(model.id != exclude_id)
    return q.first() is not None
