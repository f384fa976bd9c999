from enum import Enum

from pydantic import BaseModel


class OrgRole(str, Enum):
    ADMIN = "ADMIN"
    SCORER = "SCORER"
    MEMBER = "MEMBER"


# Role sets accepted by the org-scoped authorization dependencies
ADMIN_ROLES: frozenset["OrgRole"] = frozenset({OrgRole.ADMIN})
STAFF_ROLES: frozenset["OrgRole"] = frozenset({OrgRole.ADMIN, OrgRole.SCORER})


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class SkillLevel(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    OPEN = "OPEN"


class EventType(str, Enum):
    LEAGUE = "LEAGUE"
    TOURNAMENT = "TOURNAMENT"


class EventStatus(str, Enum):
    DRAFT = "DRAFT"
    REGISTRATION = "REGISTRATION"
    ACTIVE = "ACTIVE"
    PLAYOFF = "PLAYOFF"
    COMPLETED = "COMPLETED"


class EventVisibility(str, Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


EVENT_STATUS_LABELS: dict["EventStatus", str] = {
    EventStatus.DRAFT: "Draft",
    EventStatus.REGISTRATION: "Registration Open",
    EventStatus.ACTIVE: "Active",
    EventStatus.PLAYOFF: "Playoffs",
    EventStatus.COMPLETED: "Completed",
}


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str
