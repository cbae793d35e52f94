"""Common module — shared utilities for the leave governance engine."""

from leavegov.common.audit import AuditLog, create_audit_entry, list_audit_entries
from leavegov.common.calendar import working_days_between
from leavegov.common.constants import (
    APPROVER_RULES,
    DEFAULT_ENTITLEMENTS,
    ApprovalRole,
    AuditAction,
    LeaveStatus,
    LeaveType,
)
from leavegov.common.exceptions import (
    AppException,
    ConflictError,
    InsufficientBalanceException,
    NotFoundException,
    UpstreamUnavailableException,
    ValidationException,
    register_exception_handlers,
)

__all__ = [
    # Audit
    "AuditLog",
    "create_audit_entry",
    "list_audit_entries",
    # Calendar
    "working_days_between",
    # Constants / Enums
    "APPROVER_RULES",
    "DEFAULT_ENTITLEMENTS",
    "ApprovalRole",
    "AuditAction",
    "LeaveStatus",
    "LeaveType",
    # Exceptions
    "AppException",
    "ConflictError",
    "InsufficientBalanceException",
    "NotFoundException",
    "UpstreamUnavailableException",
    "ValidationException",
    "register_exception_handlers",
]
