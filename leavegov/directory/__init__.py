"""Employee directory — read-only lookups used for approver resolution."""

from leavegov.directory.models import Employee
from leavegov.directory.service import EmployeeDirectory

__all__ = ["Employee", "EmployeeDirectory"]
