"""Data models for lexlink."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Literal

EntityType = Literal["task", "case", "contact", "note", "deadline", "document"]
ConnectionType = Literal["related", "depends_on", "blocks", "references", "assigned_to", "part_of", "similar_to"]
ClusterType = Literal["project", "topic", "client", "deadline_group", "workflow"]
RuleType = Literal["filing", "response", "discovery", "trial", "appeal"]
RiskLevel = Literal["low", "medium", "high", "critical"]
AlertType = Literal["warning90", "warning30", "warning7", "warning24h", "overdue"]

ENTITY_TYPES: tuple[str, ...] = ("task", "case", "contact", "note", "deadline", "document")
CONNECTION_TYPES: tuple[str, ...] = (
    "related",
    "depends_on",
    "blocks",
    "references",
    "assigned_to",
    "part_of",
    "similar_to",
)
RULE_TYPES: tuple[str, ...] = ("filing", "response", "discovery", "trial", "appeal")


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string (or pass through a datetime) into an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def check_choice(value: str, allowed: tuple[str, ...], what: str) -> str:
    """Raise ValueError unless value is one of the allowed choices."""
    if value not in allowed:
        raise ValueError(f"Unsupported {what}: '{value}'. Supported: {', '.join(allowed)}")
    return value


def check_mapping(data: Any, what: str) -> None:
    """Raise TypeError unless data is a mapping."""
    if not isinstance(data, Mapping):
        raise TypeError(f"{what} must be a mapping, got {type(data).__name__}")


@dataclass
class EntitySummary:
    """Canonical summary of a trackable item (task, case, contact, ...)."""

    id: str
    type: EntityType
    title: str
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        check_choice(self.type, ENTITY_TYPES, "entity type")

    @property
    def text(self) -> str:
        """Title and description joined, as used for keyword matching."""
        return f"{self.title} {self.description or ''}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "tags": list(self.tags),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntitySummary":
        check_mapping(data, "EntitySummary record")
        return cls(
            id=str(data["id"]),
            type=data["type"],
            title=data.get("title", ""),
            description=data.get("description"),
            status=data.get("status"),
            priority=data.get("priority"),
            tags=list(data.get("tags") or []),
            created_at=parse_timestamp(data["created_at"]),
            updated_at=parse_timestamp(data["updated_at"]),
        )


@dataclass
class ConnectionMetadata:
    """Optional provenance attached to a connection."""

    reason: str | None = None
    ai_confidence: float | None = None
    user_confirmed: bool = False
    context: str | None = None

    def __post_init__(self) -> None:
        if self.ai_confidence is not None:
            self.ai_confidence = clamp_unit(self.ai_confidence)

    def to_dict(self) -> dict[str, Any]:
        return {
            "reason": self.reason,
            "ai_confidence": self.ai_confidence,
            "user_confirmed": self.user_confirmed,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConnectionMetadata":
        check_mapping(data, "ConnectionMetadata record")
        return cls(
            reason=data.get("reason"),
            ai_confidence=data.get("ai_confidence"),
            user_confirmed=bool(data.get("user_confirmed", False)),
            context=data.get("context"),
        )


def clamp_unit(value: float) -> float:
    """Clamp a score into [0, 1]."""
    return max(0.0, min(1.0, float(value)))


@dataclass
class EntityConnection:
    """A typed, weighted relationship between two entities."""

    id: str
    source_type: EntityType
    source_id: str
    target_type: EntityType
    target_id: str
    connection_type: ConnectionType
    strength: float
    auto_detected: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    metadata: ConnectionMetadata | None = None

    def __post_init__(self) -> None:
        check_choice(self.source_type, ENTITY_TYPES, "entity type")
        check_choice(self.target_type, ENTITY_TYPES, "entity type")
        check_choice(self.connection_type, CONNECTION_TYPES, "connection type")
        self.strength = clamp_unit(self.strength)

    def other_end(self, entity_id: str) -> str:
        """Return the endpoint opposite to entity_id."""
        return self.target_id if self.source_id == entity_id else self.source_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_type": self.source_type,
            "source_id": self.source_id,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "connection_type": self.connection_type,
            "strength": self.strength,
            "auto_detected": self.auto_detected,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "metadata": self.metadata.to_dict() if self.metadata else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntityConnection":
        check_mapping(data, "EntityConnection record")
        metadata = data.get("metadata")
        return cls(
            id=str(data["id"]),
            source_type=data["source_type"],
            source_id=str(data["source_id"]),
            target_type=data["target_type"],
            target_id=str(data["target_id"]),
            connection_type=data["connection_type"],
            strength=data.get("strength", 0.0),
            auto_detected=bool(data.get("auto_detected", False)),
            created_at=parse_timestamp(data["created_at"]),
            updated_at=parse_timestamp(data["updated_at"]),
            metadata=ConnectionMetadata.from_dict(metadata) if metadata else None,
        )


@dataclass
class ConnectionSuggestion:
    """A candidate connection proposed by relationship discovery. Never persisted."""

    source_id: str
    target_id: str
    connection_type: ConnectionType
    confidence: float
    reason: str
    auto_apply: bool = False
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class EntityCluster:
    """A connected component of the graph with at least two members."""

    id: str
    name: str
    entities: list[str]
    strength: float
    type: ClusterType


@dataclass
class ConnectionNetwork:
    """Snapshot of the whole graph for dashboards."""

    entities: dict[str, EntitySummary]
    connections: list[EntityConnection]
    clusters: list[EntityCluster]


@dataclass(frozen=True)
class DeadlineRule:
    """A jurisdiction-specific procedural deadline rule."""

    id: str
    name: str
    jurisdiction: str
    type: RuleType
    base_days: int
    exclude_weekends: bool = True
    exclude_holidays: bool = True
    business_days_only: bool = True
    citations: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        check_choice(self.type, RULE_TYPES, "rule type")
        if self.base_days < 0:
            raise ValueError(f"Rule {self.id} has negative base_days: {self.base_days}")

    @classmethod
    def from_dict(cls, data: dict[str, Any], jurisdiction: str | None = None) -> "DeadlineRule":
        check_mapping(data, "DeadlineRule record")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            jurisdiction=(jurisdiction or data["jurisdiction"]).lower(),
            type=data["type"],
            base_days=int(data["base_days"]),
            exclude_weekends=bool(data.get("exclude_weekends", True)),
            exclude_holidays=bool(data.get("exclude_holidays", True)),
            business_days_only=bool(data.get("business_days_only", True)),
            citations=tuple(data.get("citations") or ()),
        )


@dataclass(frozen=True)
class AlertDates:
    """The alert cascade preceding a deadline."""

    warning90: datetime
    warning30: datetime
    warning7: datetime
    warning24h: datetime

    def items(self) -> list[tuple[AlertType, datetime]]:
        return [
            ("warning90", self.warning90),
            ("warning30", self.warning30),
            ("warning7", self.warning7),
            ("warning24h", self.warning24h),
        ]


@dataclass(frozen=True)
class DeadlineCalculation:
    """Result of applying a deadline rule to a triggering date."""

    original_date: datetime
    deadline: datetime
    preparation_time: int
    alert_dates: AlertDates
    jurisdiction: str
    rule_applied: DeadlineRule
    risk_level: RiskLevel
    case_id: str | None = None
    task_id: str | None = None


@dataclass
class DeadlineAlert:
    """A time-relevant alert raised for a deadline calculation."""

    id: str
    type: AlertType
    deadline: datetime
    description: str
    urgency_level: int
    escalated: bool = False
    acknowledged: bool = False
    created_at: datetime = field(default_factory=utcnow)
    case_id: str | None = None
    task_id: str | None = None


@dataclass(frozen=True)
class Escalation:
    """How an alert should be delivered."""

    channel: Literal["email", "sms", "all"]
    recipients: tuple[str, ...]
    message: str
    priority: Literal["high", "critical"]
