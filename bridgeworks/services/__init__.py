"""Services — RequestService, ReportingService, AuditService."""

from bridgeworks.services.audit_service import AuditService
from bridgeworks.services.reporting_service import ReportingService
from bridgeworks.services.request_service import RequestService

__all__ = ["AuditService", "ReportingService", "RequestService"]
