from datetime import datetime
from typing import Literal, List, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field

JobType = Literal["full-time", "part-time", "contract", "remote"]
ExperienceLevel = Literal["entry", "mid", "senior", "executive"]
JobStatus = Literal["active", "closed", "draft"]
ApplicationStatus = Literal["pending", "reviewed", "rejected", "accepted"]
Role = Literal["candidate", "employer"]

# choices offered by the listing filter panel
CATEGORIES = (
    "Technology",
    "Marketing",
    "Design",
    "Sales",
    "Finance",
    "Healthcare",
    "Education",
    "Engineering",
    "Customer Service",
    "Human Resources",
)
JOB_TYPES = get_args(JobType)
EXPERIENCE_LEVELS = get_args(ExperienceLevel)


class JobOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employer_id: str
    title: str
    company: str
    location: str
    type: str
    category: str
    experience_level: str
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    currency: str = "$"
    description: str
    requirements: str = ""
    benefits: Optional[str] = None
    featured: bool = False
    status: str = "active"
    applications_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class JobCard(JobOut):
    """A job row plus the display strings the listing cards show."""
    salary_display: str
    type_label: str
    experience_label: str
    excerpt: str
    posted: str


class ApplicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_id: str
    candidate_id: str
    cover_letter: str
    resume_url: str
    status: str = "pending"
    created_at: Optional[datetime] = None


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    full_name: Optional[str] = None
    email: str
    role: Role
    company_name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    bio: Optional[str] = None
    resume_url: Optional[str] = None


# ---- Requests ----
class ApplyRequest(BaseModel):
    cover_letter: str = Field(..., min_length=1)
    resume_url: str = Field(..., min_length=1)


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = None
    role: Role = "candidate"
    company_name: Optional[str] = None


class SignInRequest(BaseModel):
    email: str
    password: str


# ---- Responses ----
class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: Optional[datetime] = None
    profile: ProfileOut


class PaginationOut(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    window: List[int]
    has_previous: bool
    has_next: bool
    previous_url: Optional[str] = None
    next_url: Optional[str] = None
    page_urls: dict[int, str] = {}


class JobListResponse(BaseModel):
    state: Literal["success", "error"]
    jobs: List[JobCard]
    total: int
    filters: dict[str, str]
    query_string: str
    clear_url: str
    pagination: PaginationOut


class JobDetailResponse(BaseModel):
    job: JobCard
    application_status: Optional[Literal["applied", "not_applied", "unknown"]] = None
    apply_action: Literal["sign_in", "apply", "already_applied", "edit", "none"]


class HomeResponse(BaseModel):
    featured: List[JobCard]
    recent: List[JobCard]


class FilterOption(BaseModel):
    value: str
    label: str


class FilterOptionsOut(BaseModel):
    categories: List[FilterOption]
    types: List[FilterOption]
    experience_levels: List[FilterOption]


__all__ = [
    "JobOut",
    "JobCard",
    "ApplicationOut",
    "ProfileOut",
    "ApplyRequest",
    "SignUpRequest",
    "SignInRequest",
    "TokenResponse",
    "PaginationOut",
    "JobListResponse",
    "JobDetailResponse",
    "HomeResponse",
    "FilterOption",
    "FilterOptionsOut",
]
