"""Display strings for job cards and the detail page."""
from __future__ import annotations

import html
import re
from datetime import datetime, timezone
from typing import Optional

from .schemas import JobCard, JobOut

EXCERPT_LENGTH = 150

EXPERIENCE_LABELS = {
    "entry": "Entry Level",
    "mid": "Mid Level",
    "senior": "Senior Level",
    "executive": "Executive",
}

_TAG_RE = re.compile(r"<[^>]*>")


def format_salary(salary_min: Optional[int], salary_max: Optional[int], currency: str = "$") -> str:
    if salary_min and salary_max:
        return f"{currency}{salary_min:,} - {currency}{salary_max:,}"
    if salary_min:
        return f"{currency}{salary_min:,}+"
    return "Salary not specified"


def type_label(job_type: str) -> str:
    return job_type.replace("-", " ").upper()


def experience_label(level: str) -> str:
    return EXPERIENCE_LABELS.get(level, level)


def excerpt(description: str, length: int = EXCERPT_LENGTH) -> str:
    text = html.unescape(_TAG_RE.sub("", description or "")).strip()
    return text[:length] + "..."


def time_ago(moment: datetime, now: Optional[datetime] = None) -> str:
    """Rough relative time, e.g. ``"3 days ago"``."""
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    seconds = max(0, int((now - moment).total_seconds()))
    minutes = round(seconds / 60)
    if minutes < 1:
        return "less than a minute ago"
    if minutes < 45:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = round(minutes / 60)
    if hours < 24:
        return f"about {hours} hour{'s' if hours != 1 else ''} ago"
    days = round(hours / 24)
    if days < 30:
        return f"{days} day{'s' if days != 1 else ''} ago"
    months = round(days / 30)
    if months < 12:
        return f"about {months} month{'s' if months != 1 else ''} ago"
    years = round(days / 365)
    return f"about {years} year{'s' if years != 1 else ''} ago"


def to_card(job: JobOut, now: Optional[datetime] = None) -> JobCard:
    return JobCard(
        **job.model_dump(),
        salary_display=format_salary(job.salary_min, job.salary_max, job.currency),
        type_label=type_label(job.type),
        experience_label=experience_label(job.experience_level),
        excerpt=excerpt(job.description),
        posted=time_ago(job.created_at, now),
    )
