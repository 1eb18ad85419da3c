"""Pydantic schemas for tool arguments and Dept API records."""

from .booking import (
    BookedHour,
    BookHoursBulkRequest,
    BookHoursRequest,
    Budget,
    CheckBookedHoursRequest,
    DeleteHoursRequest,
    SearchBudgetRequest,
    SearchInternalBudgetsRequest,
    UpdateHoursRequest,
    Weekdays,
)

__all__ = [
    "BookHoursBulkRequest",
    "BookHoursRequest",
    "BookedHour",
    "Budget",
    "CheckBookedHoursRequest",
    "DeleteHoursRequest",
    "SearchBudgetRequest",
    "SearchInternalBudgetsRequest",
    "UpdateHoursRequest",
    "Weekdays",
]
