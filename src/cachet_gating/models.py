# src/cachet_gating/models.py
# Core Pydantic models for resources, statuses and status sources.

"""
Defines the value types shared by the registry and the gating engine:
- ResourceStatus: discrete health of an external resource
- Resource: immutable (name, status) snapshot value
- SourceConfig: one configured Cachet endpoint
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResourceStatus(str, Enum):
    """Status of a resource as reported by Cachet."""

    OPERATIONAL = "operational"
    PERFORMANCE_ISSUES = "performance_issues"
    PARTIAL_OUTAGE = "partial_outage"
    MAJOR_OUTAGE = "major_outage"
    UNKNOWN = "unknown"

    @property
    def is_operational(self) -> bool:
        """Only OPERATIONAL satisfies a gate."""
        return self is ResourceStatus.OPERATIONAL

    def __str__(self) -> str:
        return self.name


# Cachet component status codes
_STATUS_CODES = {
    1: ResourceStatus.OPERATIONAL,
    2: ResourceStatus.PERFORMANCE_ISSUES,
    3: ResourceStatus.PARTIAL_OUTAGE,
    4: ResourceStatus.MAJOR_OUTAGE,
}


def parse_status(label: Any) -> ResourceStatus:
    """
    Map a Cachet status label or code to a ResourceStatus.

    Accepts "Major Outage", "major_outage", "MAJOR_OUTAGE" and the numeric
    codes 1-4. Never raises: anything unrecognised is UNKNOWN.
    """
    if isinstance(label, bool):
        return ResourceStatus.UNKNOWN
    if isinstance(label, int):
        return _STATUS_CODES.get(label, ResourceStatus.UNKNOWN)
    if not isinstance(label, str):
        return ResourceStatus.UNKNOWN

    text = label.strip()
    if text.isdigit():
        return _STATUS_CODES.get(int(text), ResourceStatus.UNKNOWN)

    normalized = text.lower().replace("-", " ").replace("_", " ")
    normalized = "_".join(normalized.split())
    try:
        return ResourceStatus(normalized)
    except ValueError:
        return ResourceStatus.UNKNOWN


class Resource(BaseModel):
    """A named external resource and its status at snapshot time."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique, case-sensitive resource name")
    status_id: ResourceStatus = Field(default=ResourceStatus.UNKNOWN)
    description: str = Field(default="", description="Component description from Cachet")

    @classmethod
    def unknown(cls, name: str) -> "Resource":
        """Resource for a name no source knows about."""
        return cls(name=name, status_id=ResourceStatus.UNKNOWN)

    @property
    def is_operational(self) -> bool:
        return self.status_id.is_operational

    def __str__(self) -> str:
        return f"{self.name} ({self.status_id})"


class SourceConfig(BaseModel):
    """Connection settings for one Cachet status endpoint."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., description="Cachet base URL, e.g. https://status.example.com")
    auth_token: str = Field(default="", description="Optional X-Cachet-Token value")
    insecure_tls: bool = Field(default=False, description="Skip TLS certificate verification")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("base_url must not be empty")
        return value

    def __str__(self) -> str:
        return self.base_url
