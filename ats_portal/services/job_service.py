"""
Job posting helpers shared by the job and submission routes.
"""
import re
from typing import Optional

from sqlalchemy.orm import Session

from ats_portal.db.models.job_posting import JobPosting


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", title.lower())
    slug = re.sub(r"\s+", "-", slug.strip())
    return slug or "job"


def unique_slug(db: Session, title: str, exclude_id: Optional[int] = None) -> str:
    """Slug from the title, suffixed -1, -2, ... until no other posting uses it."""
    base = slugify(title)
    slug = base
    counter = 1
    while True:
        query = db.query(JobPosting.id).filter(JobPosting.slug == slug)
        if exclude_id is not None:
            query = query.filter(JobPosting.id != exclude_id)
        if query.first() is None:
            return slug
        slug = f"{base}-{counter}"
        counter += 1


def get_active_job(db: Session, slug: str) -> Optional[JobPosting]:
    return db.query(JobPosting).filter(
        JobPosting.slug == slug,
        JobPosting.status == "active",
    ).first()
