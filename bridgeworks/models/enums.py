from __future__ import annotations

from enum import Enum


class RequestStatus(str, Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under-review"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    PLANNED = "planned"
    IN_DEVELOPMENT = "in-development"
    RELEASED = "released"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.DECLINED, RequestStatus.RELEASED)


class RequestCategory(str, Enum):
    API_INTEGRATION = "api-integration"
    USER_INTERFACE = "user-interface"
    REPORTING = "reporting"
    SECURITY = "security"
    PERFORMANCE = "performance"
    COMPLIANCE = "compliance"
    OTHER = "other"

    @classmethod
    def resolve(cls, value: "str | RequestCategory | None") -> "RequestCategory":
        """Map any raw category value onto the closed set, falling back to OTHER."""
        if isinstance(value, cls):
            return value
        return cls(str(value or ""))

    @classmethod
    def _missing_(cls, value: object) -> "RequestCategory | None":
        # Unknown or oddly-cased strings still land inside the closed set.
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
            return cls.OTHER
        return None


class UserRole(str, Enum):
    SALES = "sales"
    PRODUCT = "product"
    ADMIN = "admin"


class NoteType(str, Enum):
    NOTE = "note"
    TRANSCRIPT = "transcript"


class ImpactLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CustomerSize(str, Enum):
    ENTERPRISE = "enterprise"
    MID_MARKET = "midMarket"
    SMB = "smb"


class Urgency(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Complexity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
