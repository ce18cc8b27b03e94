from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Severity(str, Enum):
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"

    @property
    def rank(self) -> int:
        # P1 is the most urgent
        return int(self.value[1:])


class IncidentStatus(str, Enum):
    INVESTIGATING = "investigating"
    IDENTIFIED = "identified"
    MONITORING = "monitoring"
    RESOLVED = "resolved"


class ActionItemStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TimelineEntry(BaseModel):
    timestamp: datetime
    user: str
    action: str
    details: str

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class ActionItem(BaseModel):
    id: str
    description: str
    assignee: str
    due_date: str | None = None
    status: ActionItemStatus = ActionItemStatus.OPEN
    priority: Priority = Priority.MEDIUM


class IncidentRecord(BaseModel):
    """Structured incident data fed to the RCA renderer.

    A resolved incident is expected to carry ``end_time`` but this is not
    enforced; renderers substitute "Ongoing" whenever it is missing.
    """

    id: str
    title: str
    severity: Severity
    status: IncidentStatus = IncidentStatus.INVESTIGATING
    start_time: datetime
    end_time: datetime | None = None
    description: str = ""
    impacted_services: list[str] = Field(default_factory=list)
    timeline: list[TimelineEntry] = Field(default_factory=list)
    root_cause: str | None = None
    resolution: str | None = None
    action_items: list[ActionItem] | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def ensure_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class PublishMetadata(BaseModel):
    space_key: str
    parent_id: str | None = None
    labels: list[str] = Field(default_factory=list)
    template_id: str | None = None
