"""URL slugs for events, artists and venues."""
import re
from typing import Optional

from sqlalchemy.orm import Session


def generate_slug(title: str) -> str:
    """``"Jazz Night @ Café!"`` -> ``"jazz-night-caf"``."""
    slug = title.lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def unique_slug(db: Session, model, title: str, exclude_id: Optional[str] = None) -> str:
    """Slug for ``title`` not yet used by ``model``; collisions get ``-1``, ``-2`` ..."""
    base = generate_slug(title) or "untitled"
    candidate = base
    counter = 1
    while True:
        query = db.query(model.id).filter(model.slug == candidate)
        if exclude_id:
            query = query.filter(model.id != exclude_id)
        if query.first() is None:
            return candidate
        candidate = f"{base}-{counter}"
        counter += 1
