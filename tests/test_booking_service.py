from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from hour_booking.core.config import ConfigurationError, DeptSettings
from hour_booking.schemas.booking import (
    BookHoursBulkRequest,
    BookHoursRequest,
    CheckBookedHoursRequest,
    DeleteHoursRequest,
    SearchBudgetRequest,
    UpdateHoursRequest,
)
from hour_booking.services.bookings import (
    BookingNotFoundError,
    BookingRuleError,
    BookingService,
    generate_dates,
    repeat_days,
)
from hour_booking.services.budget_resolver import BudgetResolver

EXISTING = {
    "id": 77,
    "employeeId": 42,
    "date": "2024-03-04",
    "description": "Client workshop",
    "hours": "6",
    "repeat": {"days": {}, "until": "2024-03-04T22:00:00.000Z"},
    "isLocked": False,
    "canEdit": True,
    "activityId": 5,
    "activityName": "Implementation",
    "budgetId": 600,
    "budgetName": "Workshop budget",
    "companyId": 3,
    "projectId": 4,
    "projectName": "Client project",
    "corporationId": 7,
}


class FakeDeptApi:
    def __init__(self, *, existing=None, search=None, internal=None) -> None:
        self.existing = existing if existing is not None else []
        self.search = search if search is not None else []
        self.internal = internal if internal is not None else []
        self.calls: list[tuple] = []

    async def create_booking(self, booking):
        self.calls.append(("create", booking))
        return {"id": 1234, **booking}

    async def create_bulk_booking(self, booking):
        self.calls.append(("bulk", booking))
        return {"created": len(booking["dates"])}

    async def update_booking(self, booking_id, booking):
        self.calls.append(("update", booking_id, booking))
        return booking

    async def delete_booking(self, booking_id):
        self.calls.append(("delete", booking_id))
        return None

    async def list_booked_hours(self, employee_id, *, from_date, to_date, booking_id=None):
        self.calls.append(("list", employee_id, from_date, to_date, booking_id))
        return {"result": self.existing}

    async def search_budgets(self, term, corporation_id=None):
        self.calls.append(("search", term, corporation_id))
        return self.search

    async def search_internal_budgets(self, term):
        self.calls.append(("internal", term))
        return self.internal

    def mutations(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in {"create", "bulk", "update", "delete"}]


def _settings(**overrides) -> DeptSettings:
    values = {
        "DEPT_TOKEN_URL": "https://dept.example.com/oauth/token",
        "DEPT_CLIENT_ID": "client",
        "DEPT_CLIENT_SECRET": "secret",
        "DEPT_EMPLOYEE_ID": 42,
        "DEPT_CORPORATION_ID": 7,
        "DEPT_DEFAULT_ACTIVITY_ID": 100,
        "DEPT_DEFAULT_PROJECT_ID": 200,
        "DEPT_DEFAULT_COMPANY_ID": 300,
        "DEPT_DEFAULT_BUDGET_ID": 999,
    }
    values.update(overrides)
    return DeptSettings(**values)


def _service(api: FakeDeptApi, settings: DeptSettings | None = None) -> BookingService:
    settings = settings or _settings()
    resolver = BudgetResolver(
        api,
        default_budget_id=settings.default_budget_id,
        default_corporation_id=settings.corporation_id,
    )
    return BookingService(api, resolver, settings)


def test_generate_dates_defaults_to_workweek() -> None:
    # 2024-03-01 is a Friday.
    assert generate_dates("2024-03-01", "2024-03-05") == ["2024-03-01", "2024-03-04", "2024-03-05"]


def test_generate_dates_honours_selection_and_inclusive_bounds() -> None:
    dates = generate_dates("2024-03-02", "2024-03-10", {"saturday": True, "sunday": True})

    assert dates == ["2024-03-02", "2024-03-03", "2024-03-09", "2024-03-10"]


def test_generate_dates_with_empty_selection_uses_workweek() -> None:
    assert generate_dates("2024-03-09", "2024-03-11", {"monday": False}) == ["2024-03-11"]


def test_repeat_days_uses_sunday_zero_numbering() -> None:
    assert repeat_days(None) == {"1": True, "2": True, "3": True, "4": True, "5": True}
    assert repeat_days({"sunday": True, "saturday": True}) == {"6": True, "0": True}


@pytest.mark.asyncio
async def test_book_hours_applies_resolution_then_defaults() -> None:
    api = FakeDeptApi(search=[{"id": 321}])

    summary = await _service(api).book_hours(
        BookHoursRequest(hours=8, date="2024-03-04", description="Client workshop")
    )

    (_, booking), = api.mutations()
    assert booking == {
        "employeeId": 42,
        "hours": 8,
        "date": "2024-03-04",
        "description": "Client workshop",
        "repeat": {"days": {}, "until": "2024-03-04T22:00:00.000Z"},
        "isLocked": False,
        "activityId": 100,
        "corporationId": 7,
        "companyId": 300,
        "projectId": 200,
        "budgetId": 321,
        "isVacation": False,
    }
    assert "Successfully booked 8 hours for 2024-03-04" in summary
    assert "- Booking ID: 1234" in summary


@pytest.mark.asyncio
async def test_book_hours_explicit_arguments_win() -> None:
    api = FakeDeptApi(search=[{"id": 321}])

    await _service(api).book_hours(
        BookHoursRequest(
            hours=2,
            date="2024-03-04",
            description="Client workshop",
            budgetId=11,
            activityId=12,
            projectId=13,
            companyId=14,
        )
    )

    (_, booking), = api.mutations()
    assert (booking["budgetId"], booking["activityId"], booking["projectId"], booking["companyId"]) == (
        11,
        12,
        13,
        14,
    )


@pytest.mark.asyncio
async def test_book_hours_personal_description_uses_internal_budget() -> None:
    api = FakeDeptApi(
        internal=[{"id": 55, "name": "Sick leave", "activityId": 8, "projectId": 9, "companyId": 10}],
        search=[{"id": 1}],
    )

    await _service(api).book_hours(BookHoursRequest(hours=8, date="2024-03-04", description="Sick day"))

    (_, booking), = api.mutations()
    assert booking["budgetId"] == 55
    assert booking["activityName"] == "Sick leave"
    assert booking["isVacation"] is True
    assert not any(call[0] == "search" for call in api.calls)


@pytest.mark.asyncio
async def test_book_hours_without_any_budget_raises_before_posting() -> None:
    api = FakeDeptApi(search=[])
    service = _service(api, _settings(DEPT_DEFAULT_BUDGET_ID=None))

    with pytest.raises(BookingRuleError):
        await service.book_hours(BookHoursRequest(hours=1, date="2024-03-04", description="Client workshop"))

    assert api.mutations() == []


@pytest.mark.asyncio
async def test_book_hours_requires_employee_id() -> None:
    api = FakeDeptApi(search=[{"id": 1}])
    service = _service(api, _settings(DEPT_EMPLOYEE_ID=None))

    with pytest.raises(ConfigurationError):
        await service.book_hours(BookHoursRequest(hours=1, date="2024-03-04", description="Client workshop"))

    assert api.mutations() == []


@pytest.mark.asyncio
async def test_book_hours_bulk_posts_dates_and_recurrence() -> None:
    api = FakeDeptApi(search=[{"id": 321}])

    summary = await _service(api).book_hours_bulk(
        BookHoursBulkRequest(
            hours=7.5, startDate="2024-03-01", endDate="2024-03-05", description="Client workshop"
        )
    )

    (_, booking), = api.mutations()
    assert booking["hours"] == "7.5"
    assert booking["date"] == "2024-03-01"
    assert booking["dates"] == ["2024-03-01", "2024-03-04", "2024-03-05"]
    assert booking["repeat"] == {
        "days": {"1": True, "2": True, "3": True, "4": True, "5": True},
        "until": "2024-03-05T22:00:00.000Z",
    }
    assert booking["activityName"] is None
    assert "- Days: Monday-Friday" in summary
    assert "- Total Days: 3" in summary
    assert "- Total Hours: 22.5" in summary


@pytest.mark.asyncio
async def test_book_hours_bulk_with_no_matching_days_raises() -> None:
    api = FakeDeptApi(search=[{"id": 321}])
    request = BookHoursBulkRequest(
        hours=1,
        startDate="2024-03-02",
        endDate="2024-03-03",
        description="Client workshop",
    )

    with pytest.raises(BookingRuleError):
        await _service(api).book_hours_bulk(request)

    assert api.mutations() == []


@pytest.mark.asyncio
async def test_update_hours_merges_over_existing_record() -> None:
    api = FakeDeptApi(existing=[EXISTING], search=[{"id": 1}])

    summary = await _service(api).update_hours(UpdateHoursRequest(id=77, hours=4))

    list_call = api.calls[0]
    assert list_call == ("list", 42, "2000-01-01", "2100-01-01", 77)
    (_, booking_id, booking), = api.mutations()
    assert booking_id == 77
    assert booking["hours"] == "4"
    assert booking["date"] == "2024-03-04"
    assert booking["description"] == "Client workshop"
    assert booking["budgetId"] == 600
    assert booking["activityId"] == 5
    assert booking["projectId"] == 4
    assert booking["isVacation"] is False
    assert "- Hours: 6 → 4" in summary


@pytest.mark.asyncio
async def test_update_hours_sets_vacation_for_holiday_description() -> None:
    api = FakeDeptApi(existing=[EXISTING])

    await _service(api).update_hours(UpdateHoursRequest(id=77, description="Public Holiday"))

    (_, _, booking), = api.mutations()
    assert booking["isVacation"] is True
    assert booking["description"] == "Public Holiday"


@pytest.mark.asyncio
@pytest.mark.parametrize("flags", [{"isLocked": True}, {"canEdit": False}])
async def test_update_hours_refuses_locked_records(flags: dict) -> None:
    api = FakeDeptApi(existing=[{**EXISTING, **flags}])

    with pytest.raises(BookingRuleError, match="locked"):
        await _service(api).update_hours(UpdateHoursRequest(id=77, hours=2))

    assert api.mutations() == []


@pytest.mark.asyncio
async def test_update_hours_unknown_id_raises_not_found() -> None:
    api = FakeDeptApi(existing=[EXISTING])

    with pytest.raises(BookingNotFoundError):
        await _service(api).update_hours(UpdateHoursRequest(id=78, hours=2))

    assert api.mutations() == []


@pytest.mark.asyncio
async def test_delete_hours_reports_deleted_entry() -> None:
    api = FakeDeptApi(existing=[EXISTING])

    summary = await _service(api).delete_hours(DeleteHoursRequest(id=77))

    assert ("delete", 77) in api.calls
    assert "- Date: Monday, March 4, 2024" in summary
    assert "- Project: Client project" in summary
    assert "**Deletion Result:** null" in summary


@pytest.mark.asyncio
async def test_search_budget_lists_numbered_results() -> None:
    api = FakeDeptApi(search={"budgets": [{"id": 1, "name": "Design"}, {"id": 2}]})

    summary = await _service(api).search_budget(SearchBudgetRequest(term="design"))

    assert api.calls == [("search", "design", 7)]
    assert 'Found 2 budgets matching "design"' in summary
    assert "1. Design (ID: 1)" in summary
    assert "2. Unnamed Budget (ID: 2)" in summary


@pytest.mark.asyncio
async def test_check_booked_hours_totals_by_day() -> None:
    entries = [
        {"id": 1, "date": "2024-03-05T00:00:00", "hours": "4"},
        {"id": 2, "date": "2024-03-04", "hours": 3.5},
        {"id": 3, "date": "2024-03-05", "hours": "2"},
    ]
    api = FakeDeptApi(existing=entries)

    summary = await _service(api).check_booked_hours(
        CheckBookedHoursRequest(**{"from": "2024-03-04", "to": "2024-03-08"})
    )

    assert "**Total Hours**: 9.5 hours" in summary
    assert "**Number of Entries**: 3" in summary
    monday = summary.index("Monday, March 4, 2024: 3.5 hours (1 entries)")
    tuesday = summary.index("Tuesday, March 5, 2024: 6 hours (2 entries)")
    assert monday < tuesday


@pytest.mark.asyncio
async def test_check_booked_hours_without_entries() -> None:
    summary = await _service(FakeDeptApi()).check_booked_hours(
        CheckBookedHoursRequest(from_date="2024-03-04", to_date="2024-03-08")
    )

    assert "No hours booked in this period." in summary


@pytest.mark.asyncio
async def test_update_hours_reports_renamed_activity_and_project() -> None:
    api = FakeDeptApi(existing=[EXISTING])

    summary = await _service(api).update_hours(
        UpdateHoursRequest(id=77, activityName="Design", projectName="Rebrand")
    )

    assert '- Activity Name: "Implementation" → "Design"' in summary
    assert '- Project Name: "Client project" → "Rebrand"' in summary


@pytest.mark.asyncio
async def test_update_hours_skips_unchanged_names() -> None:
    api = FakeDeptApi(existing=[EXISTING])

    summary = await _service(api).update_hours(
        UpdateHoursRequest(id=77, activityName="Implementation", projectName="Client project")
    )

    assert "Activity Name" not in summary
    assert "Project Name" not in summary
