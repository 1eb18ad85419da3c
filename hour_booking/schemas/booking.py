"""Tool argument schemas and Dept API record models."""

from __future__ import annotations

from datetime import date
from typing import Annotated, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _calendar_date(value: str) -> str:
    date.fromisoformat(value)
    return value


IsoDate = Annotated[
    str, Field(pattern=r"^\d{4}-\d{2}-\d{2}$"), AfterValidator(_calendar_date)
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Weekdays(_CamelModel):
    """Days of the week included in a bulk booking."""

    monday: bool = True
    tuesday: bool = True
    wednesday: bool = True
    thursday: bool = True
    friday: bool = True
    saturday: bool = False
    sunday: bool = False


class _BookingFields(_CamelModel):
    hours: float = Field(..., ge=0.1, le=24, description="Hours to book (0.1-24).")
    description: str = Field(..., min_length=1)
    budget_id: Optional[int] = None
    employee_id: Optional[int] = None
    activity_id: Optional[int] = None
    activity_name: Optional[str] = None
    project_id: Optional[int] = None
    company_id: Optional[int] = None
    corporation_id: Optional[int] = None
    is_vacation: bool = False


class BookHoursRequest(_BookingFields):
    """Arguments of ``book_hours``."""

    date: IsoDate


class BookHoursBulkRequest(_BookingFields):
    """Arguments of ``book_hours_bulk``."""

    start_date: IsoDate
    end_date: IsoDate
    weekdays: Optional[Weekdays] = None


class UpdateHoursRequest(_CamelModel):
    """Arguments of ``update_hours``; omitted fields keep their stored values."""

    id: int
    hours: Optional[float] = Field(None, ge=0.1, le=24)
    date: Optional[IsoDate] = None
    description: Optional[str] = Field(None, min_length=1)
    budget_id: Optional[int] = None
    budget_name: Optional[str] = None
    activity_id: Optional[int] = None
    activity_name: Optional[str] = None
    project_id: Optional[int] = None
    project_name: Optional[str] = None
    company_id: Optional[int] = None
    is_vacation: bool = False


class DeleteHoursRequest(_CamelModel):
    id: int


class SearchBudgetRequest(_CamelModel):
    term: str = Field(..., min_length=1)
    corporation_id: Optional[int] = None


class SearchInternalBudgetsRequest(_CamelModel):
    search_term: str = Field(..., min_length=1)


class CheckBookedHoursRequest(BaseModel):
    """Arguments of ``check_booked_hours``."""

    model_config = ConfigDict(populate_by_name=True)

    from_date: IsoDate = Field(..., alias="from")
    to_date: IsoDate = Field(..., alias="to")
    employee_id: Optional[int] = Field(None, alias="employeeId")
    id: Optional[int] = None


class Budget(_CamelModel):
    """Budget as returned by the search endpoints."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Union[int, str]
    name: Optional[str] = None
    activity_id: Optional[int] = None
    project_id: Optional[int] = None
    project_name: Optional[str] = None
    company_id: Optional[int] = None
    corporation_id: Optional[int] = None


class BookedHour(_CamelModel):
    """Stored time entry as returned by ``/bookedhours/custom``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Union[int, str]
    employee_id: Optional[int] = None
    date: Optional[str] = None
    description: Optional[str] = None
    hours: Optional[Union[float, str]] = None
    repeat: Optional[dict] = None
    is_locked: Optional[bool] = None
    activity_id: Optional[int] = None
    activity_name: Optional[str] = None
    budget_id: Optional[int] = None
    budget_name: Optional[str] = None
    company_id: Optional[int] = None
    company_name: Optional[str] = None
    employee_display_name: Optional[str] = None
    corporation_id: Optional[int] = None
    project_id: Optional[int] = None
    project_name: Optional[str] = None
    role_id: Optional[int] = None
    can_edit: Optional[bool] = None
    project_task_id: Optional[int] = None
    budget_group_name: Optional[str] = None
    time_booking_type_id: Optional[int] = None
    project_category: Optional[str] = None
    dates: Optional[Union[dict, list]] = None
    is_vacation: Optional[bool] = None


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
