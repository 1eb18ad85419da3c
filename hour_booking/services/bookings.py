"""
Booking operations behind the MCP tools.

Each operation talks to the Dept API through :class:`DeptApiClient` and returns
a human-readable summary followed by the raw JSON result.
"""

from __future__ import annotations

import json
import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

from hour_booking.clients.dept_api import DeptApiClient
from hour_booking.core.config import ConfigurationError, DeptSettings
from hour_booking.schemas.booking import (
    BookedHour,
    BookHoursBulkRequest,
    BookHoursRequest,
    CheckBookedHoursRequest,
    DeleteHoursRequest,
    SearchBudgetRequest,
    SearchInternalBudgetsRequest,
    UpdateHoursRequest,
)
from hour_booking.services.budget_resolver import (
    HOLIDAY_KEYWORDS,
    BudgetResolution,
    BudgetResolver,
    contains_keyword,
    extract_budgets,
)

logger = logging.getLogger(__name__)

# Python weekday() numbering (Monday=0) for each day name.
_WEEKDAY_INDEX = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}
_WORKWEEK = ("monday", "tuesday", "wednesday", "thursday", "friday")

# The lookup window used to find a single booking by id.
_LOOKUP_FROM = "2000-01-01"
_LOOKUP_TO = "2100-01-01"


class BookingNotFoundError(LookupError):
    """Raised when a booking id does not match any stored entry."""


class BookingRuleError(ValueError):
    """Raised when a booking request breaks a business rule."""


def _selected_days(weekdays: Optional[Mapping[str, bool]]) -> List[str]:
    selected = [day for day in _WEEKDAY_INDEX if (weekdays or {}).get(day)]
    return selected or list(_WORKWEEK)


def generate_dates(
    start_date: str | date,
    end_date: str | date,
    weekdays: Optional[Mapping[str, bool]] = None,
) -> List[str]:
    """List ISO dates in ``[start_date, end_date]`` falling on the selected weekdays.

    No selection at all means Monday to Friday.
    """
    start = date.fromisoformat(start_date) if isinstance(start_date, str) else start_date
    end = date.fromisoformat(end_date) if isinstance(end_date, str) else end_date
    wanted = {_WEEKDAY_INDEX[day] for day in _selected_days(weekdays)}

    dates: List[str] = []
    current = start
    while current <= end:
        if current.weekday() in wanted:
            dates.append(current.isoformat())
        current += timedelta(days=1)
    return dates


def repeat_days(weekdays: Optional[Mapping[str, bool]]) -> Dict[str, bool]:
    """Recurrence ``days`` map for the API, keyed "0" (Sunday) to "6" (Saturday)."""
    return {str((_WEEKDAY_INDEX[day] + 1) % 7): True for day in _selected_days(weekdays)}


def _until(day: str) -> str:
    return f"{day}T22:00:00.000Z"


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _as_hours(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _long_date(value: Optional[str]) -> str:
    if not value:
        return "Unknown"
    try:
        parsed = date.fromisoformat(value[:10])
    except ValueError:
        return value
    return f"{parsed:%A}, {parsed:%B} {parsed.day}, {parsed.year}"


def _number(value: float) -> str:
    return f"{value:g}"


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2)


def _budget_listing(budgets: Iterable[dict]) -> str:
    return "\n".join(
        f"{index}. {budget.get('name') or 'Unnamed Budget'} (ID: {budget.get('id')})"
        for index, budget in enumerate(budgets, start=1)
    )


class BookingService:
    """Implements the booking tools on top of the Dept API."""

    def __init__(
        self,
        api_client: DeptApiClient,
        budget_resolver: BudgetResolver,
        settings: DeptSettings,
    ) -> None:
        self._api = api_client
        self._resolver = budget_resolver
        self._settings = settings

    def _employee_id(self, explicit: Optional[int] = None) -> int:
        employee_id = _first(explicit, self._settings.employee_id)
        if employee_id is None:
            raise ConfigurationError("DEPT_EMPLOYEE_ID is not configured.")
        return employee_id

    def _booking_attributes(
        self, request: BookHoursRequest | BookHoursBulkRequest, resolution: BudgetResolution
    ) -> Dict[str, Any]:
        budget_id = _first(request.budget_id, resolution.budget_id)
        if budget_id is None:
            raise BookingRuleError("Budget ID is required and could not be determined")
        return {
            "employeeId": self._employee_id(request.employee_id),
            "activityName": _first(request.activity_name, resolution.activity_name),
            "activityId": _first(
                request.activity_id, resolution.activity_id, self._settings.default_activity_id
            ),
            "corporationId": _first(
                request.corporation_id, resolution.corporation_id, self._settings.corporation_id
            ),
            "companyId": _first(
                request.company_id, resolution.company_id, self._settings.default_company_id
            ),
            "projectId": _first(
                request.project_id, resolution.project_id, self._settings.default_project_id
            ),
            "budgetId": budget_id,
            "isVacation": bool(request.is_vacation or resolution.is_vacation),
        }

    async def book_hours(self, request: BookHoursRequest) -> str:
        resolution = await self._resolver.resolve(request.description, request.corporation_id)
        attributes = self._booking_attributes(request, resolution)
        activity_name = attributes.pop("activityName")

        booking: Dict[str, Any] = {
            "employeeId": attributes.pop("employeeId"),
            "hours": request.hours,
            "date": request.date,
            "description": request.description,
            "repeat": {"days": {}, "until": _until(request.date)},
            "isLocked": False,
        }
        if activity_name is not None:
            booking["activityName"] = activity_name
        booking.update(attributes)

        result = await self._api.create_booking(booking)
        booking_id = result.get("id") if isinstance(result, dict) else None
        logger.info("Booked %s hours on %s (budget %s)", request.hours, request.date, booking["budgetId"])
        return (
            f"✅ Successfully booked {_number(request.hours)} hours for {request.date}\n\n"
            "Details:\n"
            f"- Description: {request.description}\n"
            f"- Budget ID: {booking['budgetId']}\n"
            f"- Booking ID: {booking_id or 'N/A'}\n\n"
            f"Result: {_dump(result)}"
        )

    async def book_hours_bulk(self, request: BookHoursBulkRequest) -> str:
        resolution = await self._resolver.resolve(request.description, request.corporation_id)
        attributes = self._booking_attributes(request, resolution)

        weekdays = request.weekdays.model_dump() if request.weekdays else None
        target_dates = generate_dates(request.start_date, request.end_date, weekdays)
        if not target_dates:
            raise BookingRuleError(
                "No valid dates found for the specified range and weekday selection"
            )

        booking: Dict[str, Any] = {
            "employeeId": attributes.pop("employeeId"),
            "hours": _number(request.hours),
            "date": request.start_date,
            "description": request.description,
            "repeat": {"days": repeat_days(weekdays), "until": _until(request.end_date)},
            "isLocked": False,
            **attributes,
            "dates": target_dates,
        }

        result = await self._api.create_bulk_booking(booking)
        day_names = [day.capitalize() for day in (weekdays or {}) if (weekdays or {}).get(day)]
        if request.weekdays is None or day_names == [day.capitalize() for day in _WORKWEEK]:
            days_text = "Monday-Friday"
        else:
            days_text = ", ".join(day_names) or "Monday-Friday"
        logger.info("Bulk booked %s days from %s", len(target_dates), request.start_date)
        return (
            f"✅ Successfully booked {_number(request.hours)} hours per day in bulk\n\n"
            "Details:\n"
            f"- Date Range: {request.start_date} to {request.end_date}\n"
            f"- Days: {days_text}\n"
            f"- Total Days: {len(target_dates)}\n"
            f"- Total Hours: {_number(request.hours * len(target_dates))}\n"
            f"- Description: {request.description}\n"
            f"- Budget ID: {booking['budgetId']}\n\n"
            f"Dates booked: {', '.join(target_dates)}\n\n"
            f"Result: {_dump(result)}"
        )

    async def find_booking(self, booking_id: int) -> BookedHour:
        """Look a booking up through the custom list endpoint; single GET is deprecated."""
        payload = await self._api.list_booked_hours(
            self._employee_id(),
            from_date=_LOOKUP_FROM,
            to_date=_LOOKUP_TO,
            booking_id=booking_id,
        )
        entries = payload.get("result") if isinstance(payload, dict) else None
        for entry in entries or []:
            if str(entry.get("id")) == str(booking_id):
                return BookedHour.model_validate(entry)
        raise BookingNotFoundError(f"Time booking with ID {booking_id} not found")

    async def update_hours(self, request: UpdateHoursRequest) -> str:
        existing = await self.find_booking(request.id)
        if existing.is_locked or existing.can_edit is False:
            raise BookingRuleError("Cannot update hours: budget is locked.")

        description = _first(request.description, existing.description)
        resolution = await self._resolver.resolve(
            description or "", existing.corporation_id
        )
        defaults = self._settings

        budget_id = _first(request.budget_id, existing.budget_id, resolution.budget_id)
        budget_name = _first(request.budget_name, existing.budget_name, resolution.activity_name)
        activity_id = _first(request.activity_id, existing.activity_id, resolution.activity_id)
        activity_name = _first(
            request.activity_name, existing.activity_name, resolution.activity_name
        )
        project_id = _first(request.project_id, existing.project_id, resolution.project_id)
        project_name = _first(request.project_name, existing.project_name, resolution.project_name)
        company_id = _first(request.company_id, existing.company_id, resolution.company_id)
        is_vacation = bool(
            request.is_vacation
            or existing.is_vacation
            or resolution.is_vacation
            or contains_keyword(description, HOLIDAY_KEYWORDS)
        )
        booking_date = _first(request.date, existing.date)
        hours = _first(request.hours, existing.hours)

        if not booking_date:
            raise BookingRuleError(
                "Date is required and could not be determined from existing record"
            )
        if not description:
            raise BookingRuleError(
                "Description is required and could not be determined from existing record"
            )
        if hours is None or hours == "":
            raise BookingRuleError(
                "Hours is required and could not be determined from existing record"
            )

        booking = {
            "employeeId": _first(existing.employee_id, defaults.employee_id),
            "id": request.id,
            "date": booking_date,
            "description": description,
            "hours": _number(hours) if isinstance(hours, float) else str(hours),
            "repeat": existing.repeat or {"days": {}, "until": _until(booking_date[:10])},
            "isLocked": bool(existing.is_locked),
            "activityId": _first(activity_id, defaults.default_activity_id),
            "activityName": activity_name or "Implementation",
            "budgetId": _first(budget_id, defaults.default_budget_id),
            "budgetName": budget_name or "Default Budget",
            "companyId": _first(company_id, defaults.default_company_id),
            "companyName": existing.company_name or "Default Company",
            "employeeDisplayName": existing.employee_display_name or "Employee",
            "projectId": _first(project_id, defaults.default_project_id),
            "projectName": project_name or "Default Project",
            "roleId": existing.role_id or 33,
            "canEdit": _first(existing.can_edit, True),
            "projectTaskId": existing.project_task_id,
            "budgetGroupName": existing.budget_group_name or "Default Budget Group",
            "timeBookingTypeId": existing.time_booking_type_id or 1,
            "projectCategory": existing.project_category or "Client",
            "dates": existing.dates,
            "isVacation": is_vacation,
        }

        logger.debug("Budget resolution for update %s: %s", request.id, resolution)
        result = await self._api.update_booking(request.id, booking)

        changes = self._describe_changes(request, existing, booking)
        change_text = (
            "Changes made:\n" + "\n".join(changes) + "\n\n" if changes else "No changes were made.\n\n"
        )
        return (
            f"✅ Successfully updated booking {request.id}\n\n"
            f"{change_text}"
            "Preserved fields:\n- All other fields maintained their original values\n\n"
            f"Updated record: {_dump(result)}"
        )

    @staticmethod
    def _describe_changes(
        request: UpdateHoursRequest, existing: BookedHour, booking: Dict[str, Any]
    ) -> List[str]:
        changes: List[str] = []
        if request.hours is not None:
            changes.append(f"- Hours: {existing.hours} → {_number(request.hours)}")
        if request.date:
            changes.append(f"- Date: {existing.date} → {request.date}")
        if request.description:
            changes.append(f'- Description: "{existing.description}" → "{request.description}"')
        if request.activity_name and request.activity_name != existing.activity_name:
            changes.append(
                f'- Activity Name: "{existing.activity_name}" → "{request.activity_name}"'
            )
        if request.project_name and request.project_name != existing.project_name:
            changes.append(
                f'- Project Name: "{existing.project_name}" → "{request.project_name}"'
            )
        if booking["activityId"] != existing.activity_id:
            changes.append(
                f"- Activity: {existing.activity_name or existing.activity_id} → "
                f"{booking['activityName'] or booking['activityId']}"
            )
        if booking["budgetId"] != existing.budget_id:
            changes.append(
                f"- Budget: {existing.budget_name or existing.budget_id} → "
                f"{booking['budgetName'] or booking['budgetId']}"
            )
        if booking["projectId"] != existing.project_id:
            changes.append(
                f"- Project: {existing.project_name or existing.project_id} → "
                f"{booking['projectName'] or booking['projectId']}"
            )
        if booking["isVacation"] != bool(existing.is_vacation):
            changes.append(
                f"- isVacation: {'Yes' if existing.is_vacation else 'No'} → "
                f"{'Yes' if booking['isVacation'] else 'No'}"
            )
        return changes

    async def delete_hours(self, request: DeleteHoursRequest) -> str:
        existing = await self.find_booking(request.id)
        result = await self._api.delete_booking(request.id)
        logger.info("Deleted booking %s", request.id)
        return (
            f"🗑️ Successfully deleted time entry (ID: {request.id})\n\n"
            "**Deleted Entry Details:**\n"
            f"- Date: {_long_date(existing.date)}\n"
            f"- Hours: {existing.hours or 'Unknown'}\n"
            f"- Description: {existing.description or 'No description'}\n"
            f"- Project: {existing.project_name or 'Unknown'}\n"
            f"- Budget: {existing.budget_name or 'Unknown'}\n\n"
            f"**Deletion Result:** {_dump(result)}"
        )

    async def search_budget(self, request: SearchBudgetRequest) -> str:
        result = await self._api.search_budgets(
            request.term, _first(request.corporation_id, self._settings.corporation_id)
        )
        budgets = extract_budgets(result)
        return (
            f'🔍 Found {len(budgets)} budgets matching "{request.term}"\n\n'
            f"{_budget_listing(budgets)}\n\n"
            f"Full results:\n{_dump(result)}"
        )

    async def search_internal_budgets(self, request: SearchInternalBudgetsRequest) -> str:
        result = await self._api.search_internal_budgets(request.search_term)
        budgets = extract_budgets(result)
        return (
            f'🔍 Found {len(budgets)} internal budgets matching "{request.search_term}"\n\n'
            f"{_budget_listing(budgets)}\n\n"
            f"Full results:\n{_dump(result)}"
        )

    async def check_booked_hours(self, request: CheckBookedHoursRequest) -> str:
        result = await self._api.list_booked_hours(
            self._employee_id(request.employee_id),
            from_date=request.from_date,
            to_date=request.to_date,
            booking_id=request.id,
        )
        if isinstance(result, dict) and isinstance(result.get("result"), list):
            entries = result["result"]
        elif isinstance(result, list):
            entries = result
        else:
            entries = []

        total = sum(_as_hours(entry.get("hours")) for entry in entries)
        lines = [
            f"📊 Booked Hours Summary ({_long_date(request.from_date)} to "
            f"{_long_date(request.to_date)})",
            "",
            f"**Total Hours**: {_number(total)} hours",
            f"**Number of Entries**: {len(entries)}",
            "",
        ]
        if entries:
            by_date: Dict[str, List[dict]] = {}
            for entry in entries:
                day = (entry.get("date") or "Unknown").split("T")[0]
                by_date.setdefault(day, []).append(entry)
            lines.append("**Daily Breakdown**:")
            for day in sorted(by_date):
                day_total = sum(_as_hours(entry.get("hours")) for entry in by_date[day])
                lines.append(
                    f"• {_long_date(day)}: {_number(day_total)} hours "
                    f"({len(by_date[day])} entries)"
                )
        else:
            lines.append("❌ No hours booked in this period.")

        return "\n".join(lines) + f"\n\n**Full Details**:\n{_dump(result)}"


__all__ = [
    "BookingNotFoundError",
    "BookingRuleError",
    "BookingService",
    "generate_dates",
    "repeat_days",
]
