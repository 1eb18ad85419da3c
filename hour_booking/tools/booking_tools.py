"""
MCP tool surface for the booking service.

Tool arguments arrive keyed by their camelCase names, are validated with the
request schemas and handed to :class:`BookingService`. Authentication prompts
are returned as ordinary text so the agent can show the sign-in link.
"""

from __future__ import annotations

import inspect
import logging
from typing import Annotated, Any, Awaitable, Callable, Mapping, Optional, Type

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import BaseModel, Field, ValidationError

from hour_booking.schemas.booking import (
    BookHoursBulkRequest,
    BookHoursRequest,
    CheckBookedHoursRequest,
    DeleteHoursRequest,
    SearchBudgetRequest,
    SearchInternalBudgetsRequest,
    UpdateHoursRequest,
)
from hour_booking.services.access_tokens import AuthenticationRequired
from hour_booking.services.bookings import BookingService

logger = logging.getLogger(__name__)

TOOL_DESCRIPTIONS = {
    "book_hours": (
        "Book a time entry in the Dept system. The budget, project and activity "
        "are looked up from the description when not given."
    ),
    "book_hours_bulk": (
        "Book the same hours on every selected weekday in a date range "
        "(Monday to Friday unless weekdays are given)."
    ),
    "update_hours": (
        "Update an existing time entry. Only the fields passed are changed; "
        "everything else keeps its stored value."
    ),
    "delete_hours": "Delete a time entry by its ID.",
    "search_budget": "Search for budgets by term.",
    "search_internal_budgets": "Search internal budgets such as leave, holidays or overhead.",
    "check_booked_hours": "Summarise the hours booked between two dates.",
}


def _format_validation_error(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
        for error in exc.errors()
    )


class BookingTools:
    """Argument validation and error translation around :class:`BookingService`."""

    def __init__(self, service: BookingService) -> None:
        self._service = service

    async def book_hours(self, arguments: Mapping[str, Any]) -> str:
        return await self._run(BookHoursRequest, arguments, self._service.book_hours)

    async def book_hours_bulk(self, arguments: Mapping[str, Any]) -> str:
        return await self._run(BookHoursBulkRequest, arguments, self._service.book_hours_bulk)

    async def update_hours(self, arguments: Mapping[str, Any]) -> str:
        return await self._run(UpdateHoursRequest, arguments, self._service.update_hours)

    async def delete_hours(self, arguments: Mapping[str, Any]) -> str:
        return await self._run(DeleteHoursRequest, arguments, self._service.delete_hours)

    async def search_budget(self, arguments: Mapping[str, Any]) -> str:
        return await self._run(SearchBudgetRequest, arguments, self._service.search_budget)

    async def search_internal_budgets(self, arguments: Mapping[str, Any]) -> str:
        return await self._run(
            SearchInternalBudgetsRequest, arguments, self._service.search_internal_budgets
        )

    async def check_booked_hours(self, arguments: Mapping[str, Any]) -> str:
        return await self._run(
            CheckBookedHoursRequest, arguments, self._service.check_booked_hours
        )

    async def _run(
        self,
        schema: Type[BaseModel],
        arguments: Mapping[str, Any],
        handler: Callable[[Any], Awaitable[str]],
    ) -> str:
        try:
            request = schema.model_validate(dict(arguments))
        except ValidationError as exc:
            raise ToolError(f"Invalid parameters: {_format_validation_error(exc)}") from exc

        try:
            return await handler(request)
        except AuthenticationRequired as exc:
            logger.info("Authentication required; returning sign-in link")
            return exc.message
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Tool %s failed", handler.__name__)
            raise ToolError(f"Tool execution failed: {exc}") from exc


def _tool_signature(schema: Type[BaseModel]) -> inspect.Signature:
    """Expose the schema's fields under their wire names without its range checks."""
    parameters = []
    for name, field in schema.model_fields.items():
        annotation = field.annotation
        default = inspect.Parameter.empty
        if not field.is_required():
            annotation = Optional[annotation]
            default = None
        parameters.append(
            inspect.Parameter(
                name,
                inspect.Parameter.KEYWORD_ONLY,
                default=default,
                annotation=Annotated[
                    annotation,
                    Field(alias=field.alias or name, description=field.description),
                ],
            )
        )
    return inspect.Signature(parameters, return_annotation=str)


def _make_tool(
    name: str,
    schema: Type[BaseModel],
    method: Callable[[Mapping[str, Any]], Awaitable[str]],
) -> Callable[..., Awaitable[str]]:
    async def tool(**arguments: Any) -> str:
        supplied = {key: value for key, value in arguments.items() if value is not None}
        return await method(supplied)

    tool.__name__ = name
    tool.__doc__ = TOOL_DESCRIPTIONS[name]
    tool.__signature__ = _tool_signature(schema)  # type: ignore[attr-defined]
    return tool


def register_booking_tools(mcp: FastMCP, tools: BookingTools) -> None:
    """Register every booking tool on ``mcp``."""
    registry = (
        ("book_hours", BookHoursRequest, tools.book_hours),
        ("book_hours_bulk", BookHoursBulkRequest, tools.book_hours_bulk),
        ("update_hours", UpdateHoursRequest, tools.update_hours),
        ("delete_hours", DeleteHoursRequest, tools.delete_hours),
        ("search_budget", SearchBudgetRequest, tools.search_budget),
        ("search_internal_budgets", SearchInternalBudgetsRequest, tools.search_internal_budgets),
        ("check_booked_hours", CheckBookedHoursRequest, tools.check_booked_hours),
    )
    for name, schema, method in registry:
        mcp.add_tool(
            _make_tool(name, schema, method),
            name=name,
            description=TOOL_DESCRIPTIONS[name],
        )
    logger.debug("Registered %s booking tools", len(registry))


__all__ = ["BookingTools", "TOOL_DESCRIPTIONS", "register_booking_tools"]
