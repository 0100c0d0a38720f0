"""
Typed records for the payloads the civic backend returns.

Each record is built once, at the response boundary, through its
``from_api`` constructor. Optional fields get their defaults there so the
rest of the code never chains fallbacks over raw dicts.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar


T = TypeVar("T")


class UserRole(str, Enum):
    """Roles issued by the backend"""
    CITIZEN = "CITIZEN"
    DISTRICT_LEADER = "DISTRICT_LEADER"
    SECTOR_LEADER = "SECTOR_LEADER"
    CELL_LEADER = "CELL_LEADER"
    DISTRICT_ADMIN = "DISTRICT_ADMIN"
    SECTOR_ADMIN = "SECTOR_ADMIN"
    CELL_ADMIN = "CELL_ADMIN"
    ADMIN = "ADMIN"


class Level(str, Enum):
    """Administrative level of a leader or an escalation"""
    CELL = "CELL"
    SECTOR = "SECTOR"
    DISTRICT = "DISTRICT"


class Language(str, Enum):
    ENGLISH = "ENGLISH"
    KINYARWANDA = "KINYARWANDA"
    FRENCH = "FRENCH"


class PostType(str, Enum):
    """Kinds of post a comment or response can hang off"""
    ISSUE = "ISSUE"
    RESPONSE = "RESPONSE"
    COMMENT = "COMMENT"
    TOPIC = "TOPIC"
    TOPIC_REPLY = "TOPIC_REPLY"
    POLL = "POLL"
    SURVEY = "SURVEY"
    SURVEY_QUESTION = "SURVEY_QUESTION"


class IssueStatus(str, Enum):
    RECEIVED = "RECEIVED"
    ESCALATED = "ESCALATED"
    WAITING_FOR_USER_RESPONSE = "WAITING_FOR_USER_RESPONSE"
    CLOSED = "CLOSED"
    OVERDUE = "OVERDUE"
    RESOLVED = "RESOLVED"


class Urgency(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    URGENT = "URGENT"


class IssueType(str, Enum):
    POSITIVE_REVIEW = "POSITIVE_REVIEW"
    NEGATIVE_ISSUE = "NEGATIVE_ISSUE"
    SUGGESTION = "SUGGESTION"


class ResponseStatus(str, Enum):
    FOLLOW_UP = "FOLLOW_UP"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"
    ESCALATED = "ESCALATED"


class AccountStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    PENDING = "PENDING"


class AttachmentType(str, Enum):
    PHOTO = "PHOTO"
    PDF = "PDF"
    AUDIO = "AUDIO"
    VIDEO = "VIDEO"


def _str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _bool(value: Any) -> bool:
    return bool(value) if value is not None else False


def _enum(enum_cls, value: Any, default=None):
    """Coerce into enum_cls; unknown values fall back to default"""
    if value is None:
        return default
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        return default


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


# ==================== People & Places ====================

@dataclass
class Location:
    district: str = ""
    sector: str = ""
    cell: str = ""
    village: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    id: Optional[int] = None

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> "Location":
        data = _dict(data)
        return cls(
            district=_str(data.get("district")),
            sector=_str(data.get("sector")),
            cell=_str(data.get("cell")),
            village=_str(data.get("village")),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            id=data.get("id"),
        )

    def is_empty(self) -> bool:
        return not (self.district or self.sector or self.cell or self.village)

    def describe(self) -> str:
        parts = [p for p in (self.village, self.cell, self.sector, self.district) if p]
        return ", ".join(parts)


@dataclass
class Department:
    id: int
    name_en: str
    name_rw: str = ""
    name_fr: str = ""
    description: str = ""
    is_active: bool = True
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Department":
        data = _dict(data)
        return cls(
            id=_int(data.get("id")),
            name_en=_str(data.get("nameEn")),
            name_rw=_str(data.get("nameRw")),
            name_fr=_str(data.get("nameFr")),
            description=_str(data.get("description")),
            is_active=_bool(data.get("isActive", data.get("active", True))),
            created_at=_str(data.get("createdAt")),
            updated_at=_str(data.get("updatedAt")),
        )

    def name_for(self, language: Language = Language.ENGLISH) -> str:
        if language == Language.KINYARWANDA and self.name_rw:
            return self.name_rw
        if language == Language.FRENCH and self.name_fr:
            return self.name_fr
        return self.name_en


@dataclass
class UserProfile:
    """Citizen (or any backend user) as cached in the citizen namespace"""
    id: str
    first_name: str
    last_name: str
    name: str
    email: str = ""
    phone_number: str = ""
    profile_url: str = ""
    role: str = UserRole.CITIZEN.value
    location: Optional[Location] = None

    @classmethod
    def from_auth_user(cls, user: Dict[str, Any]) -> "UserProfile":
        """Build from the ``user`` object of an auth or profile response"""
        user = _dict(user)
        first = _str(user.get("firstName"))
        last = _str(user.get("lastName"))
        location = user.get("location")
        return cls(
            id=_str(user.get("id")),
            first_name=first,
            last_name=last,
            name=f"{first} {last}".strip(),
            email=_str(user.get("email")),
            phone_number=_str(user.get("phoneNumber")),
            profile_url=_str(user.get("profileUrl")),
            role=_str(user.get("role"), UserRole.CITIZEN.value),
            location=Location.from_api(location) if isinstance(location, dict) else None,
        )

    # Backend payloads nested in other records use the same shape
    from_api = from_auth_user

    def is_profile_complete(self) -> bool:
        loc = self.location
        return bool(loc and loc.district and loc.sector and loc.cell and loc.village)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        data = dict(data)
        location = data.pop("location", None)
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known, location=Location(**location) if isinstance(location, dict) else None)


_LEVEL_BY_ROLE = {
    UserRole.DISTRICT_LEADER.value: "district",
    UserRole.SECTOR_LEADER.value: "sector",
}


@dataclass
class Leader:
    """Government leader as cached in the admin namespace"""
    id: str
    first_name: str
    last_name: str
    name: str
    email: str = ""
    phone_number: str = ""
    avatar: str = ""
    level: str = "cell"
    location: Location = field(default_factory=Location)
    department: str = "Administration"
    role: str = ""
    verified: bool = False
    joined_at: str = ""

    @classmethod
    def from_auth_user(cls, user: Dict[str, Any], verified: bool = True,
                       joined_at: str = "") -> "Leader":
        """Map a login/registration user record to a leader profile.

        The level comes from the role; anything that is not a district or
        sector leader is treated as a cell-level leader.
        """
        user = _dict(user)
        first = _str(user.get("firstName"))
        last = _str(user.get("lastName"))
        role = _str(user.get("role"))
        location = user.get("location")
        return cls(
            id=_str(user.get("id")),
            first_name=first,
            last_name=last,
            name=f"{first} {last}".strip(),
            email=_str(user.get("email")),
            phone_number=_str(user.get("phoneNumber")),
            avatar=_str(user.get("profileUrl")),
            level=_LEVEL_BY_ROLE.get(role, "cell"),
            location=Location.from_api(location) if isinstance(location, dict) else Location(),
            role=role,
            verified=verified,
            joined_at=joined_at,
        )

    def is_profile_complete(self) -> bool:
        return bool(self.level and self.location.district and self.location.district.strip())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Leader":
        data = dict(data)
        location = data.pop("location", None)
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known, location=Location(**location) if isinstance(location, dict) else Location())


# ==================== Content ====================

@dataclass
class Attachment:
    id: Optional[int]
    url: str
    type: Optional[AttachmentType] = None
    description: str = ""
    uploaded_at: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Attachment":
        data = _dict(data)
        return cls(
            id=data.get("id"),
            url=_str(data.get("url")),
            type=_enum(AttachmentType, data.get("type")),
            description=_str(data.get("description")),
            uploaded_at=_str(data.get("uploadedAt")),
        )


@dataclass
class Issue:
    id: int
    title: str
    description: str
    category: str = ""
    issue_type: Optional[IssueType] = None
    language: Optional[Language] = None
    ticket_id: str = ""
    status: str = IssueStatus.RECEIVED.value
    urgency: str = Urgency.LOW.value
    level: Optional[str] = None
    created_by: Optional[UserProfile] = None
    assigned_to: Optional[UserProfile] = None
    location: Location = field(default_factory=Location)
    attachments: List[Attachment] = field(default_factory=list)
    comments: List[Dict[str, Any]] = field(default_factory=list)
    likes: int = 0
    followers: int = 0
    liked_by_user: bool = False
    followed_by_user: bool = False
    private: bool = False
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Issue":
        data = _dict(data)
        created_by = data.get("createdBy")
        assigned_to = data.get("assignedTo")
        return cls(
            id=_int(data.get("id")),
            title=_str(data.get("title")),
            description=_str(data.get("description")),
            category=_str(data.get("category")),
            issue_type=_enum(IssueType, data.get("issueType")),
            language=_enum(Language, data.get("language")),
            ticket_id=_str(data.get("ticketId")),
            status=_str(data.get("status"), IssueStatus.RECEIVED.value),
            urgency=_str(data.get("urgency"), Urgency.LOW.value),
            level=data.get("level"),
            created_by=UserProfile.from_api(created_by) if isinstance(created_by, dict) else None,
            assigned_to=UserProfile.from_api(assigned_to) if isinstance(assigned_to, dict) else None,
            location=Location.from_api(data.get("location")),
            attachments=[Attachment.from_api(a) for a in _list(data.get("attachments"))],
            comments=_list(data.get("comments")),
            likes=_int(data.get("likes")),
            followers=_int(data.get("followers")),
            liked_by_user=_bool(data.get("likedByUser")),
            followed_by_user=_bool(data.get("followedByUser")),
            private=_bool(data.get("private", data.get("isPrivate"))),
            created_at=_str(data.get("createdAt")),
            updated_at=_str(data.get("updatedAt")),
        )


@dataclass
class Topic:
    id: int
    title: str
    description: str
    tags: List[str] = field(default_factory=list)
    created_by: Optional[UserProfile] = None
    language: Optional[Language] = None
    focus_level: str = ""
    location: Location = field(default_factory=Location)
    attachments: List[Attachment] = field(default_factory=list)
    upvote_count: int = 0
    downvote_count: int = 0
    has_upvoted: bool = False
    has_downvoted: bool = False
    follower_count: int = 0
    reply_count: int = 0
    has_regional_focus: bool = False
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Topic":
        data = _dict(data)
        created_by = data.get("createdBy")
        # Older payloads used content/hashtags
        return cls(
            id=_int(data.get("id")),
            title=_str(data.get("title")),
            description=_str(data.get("description", data.get("content"))),
            tags=[str(t) for t in _list(data.get("tags", data.get("hashtags")))],
            created_by=UserProfile.from_api(created_by) if isinstance(created_by, dict) else None,
            language=_enum(Language, data.get("language")),
            focus_level=_str(data.get("focusLevel")),
            location=Location.from_api(data.get("location") or data.get("focusLocation")),
            attachments=[Attachment.from_api(a) for a in _list(data.get("attachments"))],
            upvote_count=_int(data.get("upvoteCount")),
            downvote_count=_int(data.get("downvoteCount")),
            has_upvoted=_bool(data.get("hasUpvoted")),
            has_downvoted=_bool(data.get("hasDownvoted")),
            follower_count=_int(data.get("followerCount")),
            reply_count=_int(data.get("replycount", data.get("replyCount"))),
            has_regional_focus=_bool(data.get("hasRegionalFocus")),
            created_at=_str(data.get("createdAt")),
            updated_at=_str(data.get("updatedAt")),
        )


@dataclass
class ResponseRecord:
    """Official or follow-up response attached to a post"""
    id: int
    post_type: Optional[PostType]
    post_id: int
    message: str = ""
    status: Optional[ResponseStatus] = None
    responder: Optional[UserProfile] = None
    is_public: bool = True
    language: Optional[Language] = None
    attachments: List[Attachment] = field(default_factory=list)
    children: List["ResponseRecord"] = field(default_factory=list)
    upvote_count: int = 0
    downvote_count: int = 0
    average_rating: Optional[float] = None
    created_at: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ResponseRecord":
        data = _dict(data)
        responder = data.get("responder")
        return cls(
            id=_int(data.get("id")),
            post_type=_enum(PostType, data.get("postType")),
            post_id=_int(data.get("postId")),
            message=_str(data.get("message")),
            status=_enum(ResponseStatus, data.get("status")),
            responder=UserProfile.from_api(responder) if isinstance(responder, dict) else None,
            is_public=_bool(data.get("isPublic", True)),
            language=_enum(Language, data.get("language")),
            attachments=[Attachment.from_api(a) for a in _list(data.get("attachments"))],
            children=[cls.from_api(c) for c in _list(data.get("children"))],
            upvote_count=_int(data.get("upvoteCount")),
            downvote_count=_int(data.get("downvoteCount")),
            average_rating=data.get("averageRating"),
            created_at=_str(data.get("createdAt")),
        )


@dataclass
class Announcement:
    id: int
    title: str
    description: str
    language: Optional[Language] = None
    view_count: int = 0
    has_viewed: bool = False
    attachments: List[Attachment] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    end_time: str = ""
    active: bool = True

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Announcement":
        data = _dict(data)
        return cls(
            id=_int(data.get("id")),
            title=_str(data.get("title")),
            description=_str(data.get("description")),
            language=_enum(Language, data.get("language")),
            view_count=_int(data.get("viewCount")),
            has_viewed=_bool(data.get("hasViewed")),
            attachments=[Attachment.from_api(a) for a in _list(data.get("attachments"))],
            created_at=_str(data.get("createdAt")),
            updated_at=_str(data.get("updatedAt")),
            end_time=_str(data.get("endTime")),
            active=_bool(data.get("active", True)),
        )


# ==================== Leaders administration ====================

@dataclass
class LeaderSearchResult:
    user_id: int
    first_name: str
    last_name: str
    full_name: str
    phone_number: str = ""
    email: str = ""
    role: str = ""
    account_status: Optional[AccountStatus] = None
    leadership_level: str = ""
    leadership_place_name: str = ""
    department_name: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "LeaderSearchResult":
        data = _dict(data)
        first = _str(data.get("firstName"))
        last = _str(data.get("lastName"))
        return cls(
            user_id=_int(data.get("userId", data.get("id"))),
            first_name=first,
            last_name=last,
            full_name=_str(data.get("fullName")) or f"{first} {last}".strip(),
            phone_number=_str(data.get("phoneNumber")),
            email=_str(data.get("email")),
            role=_str(data.get("role")),
            account_status=_enum(AccountStatus, data.get("accountStatus")),
            leadership_level=_str(data.get("leadershipLevel", data.get("leadershipLevelName"))),
            leadership_place_name=_str(data.get("leadershipPlaceName")),
            department_name=_str(data.get("departmentName")),
        )


@dataclass
class AddLeaderResult:
    user_id: int
    first_name: str
    phone_number: str
    role: str = ""
    account_status: Optional[AccountStatus] = None
    leadership_level: str = ""
    leadership_place_name: str = ""
    generated_password: str = ""
    message: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "AddLeaderResult":
        data = _dict(data)
        return cls(
            user_id=_int(data.get("userId")),
            first_name=_str(data.get("firstName")),
            phone_number=_str(data.get("phoneNumber")),
            role=_str(data.get("role")),
            account_status=_enum(AccountStatus, data.get("accountStatus")),
            leadership_level=_str(data.get("leadershipLevel")),
            leadership_place_name=_str(data.get("leadershipPlaceName")),
            generated_password=_str(data.get("generatedPassword")),
            message=_str(data.get("message")),
        )


@dataclass
class LeaderDashboard:
    leader_id: int
    leader_name: str
    issue_metrics: Dict[str, float] = field(default_factory=dict)
    topic_metrics: Dict[str, float] = field(default_factory=dict)
    announcement_metrics: Dict[str, float] = field(default_factory=dict)
    response_metrics: Dict[str, float] = field(default_factory=dict)
    performance_scores: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "LeaderDashboard":
        data = _dict(data)
        info = _dict(data.get("leaderInfo"))
        return cls(
            leader_id=_int(info.get("id")),
            leader_name=_str(info.get("name")),
            issue_metrics=_dict(data.get("issueMetrics")),
            topic_metrics=_dict(data.get("topicMetrics")),
            announcement_metrics=_dict(data.get("announcementMetrics")),
            response_metrics=_dict(data.get("responseMetrics")),
            performance_scores=_dict(data.get("performanceScores")),
        )

    @property
    def resolution_rate(self) -> float:
        return float(self.issue_metrics.get("resolutionRate", 0) or 0)


# ==================== Pagination ====================

@dataclass
class Page(Generic[T]):
    """One page of a Spring-style paginated listing"""
    content: List[T]
    number: int = 0
    size: int = 20
    total_elements: int = 0
    total_pages: int = 0
    first: bool = True
    last: bool = True

    @classmethod
    def from_api(cls, data: Dict[str, Any], item: Callable[[Dict[str, Any]], T]) -> "Page[T]":
        data = _dict(data)
        content = [item(entry) for entry in _list(data.get("content"))]
        return cls(
            content=content,
            number=_int(data.get("number")),
            size=_int(data.get("size"), len(content)),
            total_elements=_int(data.get("totalElements"), len(content)),
            total_pages=_int(data.get("totalPages")),
            first=_bool(data.get("first", True)),
            last=_bool(data.get("last", True)),
        )

    @property
    def has_next(self) -> bool:
        return not self.last

    @property
    def has_previous(self) -> bool:
        return not self.first
