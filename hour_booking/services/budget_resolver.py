"""
Infer booking metadata from a free-text description.

Leave-like descriptions are matched against the internal budgets endpoint
first; everything else goes through the general budget search, and finally the
configured default budget.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from hour_booking.clients.dept_api import DeptApiClient
from hour_booking.schemas.booking import Budget

logger = logging.getLogger(__name__)

# Matched as lower-case substrings, so "leave" also hits "cleaver".
PERSONAL_KEYWORDS = (
    "holiday",
    "vacation",
    "vakantie",
    "verlof",
    "leave",
    "day off",
    "time off",
    "sick",
    "ziek",
    "doctor",
    "dentist",
    "personal",
    "overhead",
    "training",
)

HOLIDAY_KEYWORDS = (
    "holiday",
    "vacation",
    "vakantie",
    "verlof",
    "leave",
    "day off",
    "time off",
    "sick",
    "ziek",
)


class ResolutionTier(str, enum.Enum):
    INTERNAL = "internal"
    SEARCH = "search"
    DEFAULT = "default"
    NONE = "none"


@dataclass
class BudgetResolution:
    """Booking attributes inferred for one description; unset fields are ``None``."""

    budget_id: Optional[int] = None
    activity_id: Optional[int] = None
    activity_name: Optional[str] = None
    project_id: Optional[int] = None
    project_name: Optional[str] = None
    company_id: Optional[int] = None
    corporation_id: Optional[int] = None
    is_vacation: Optional[bool] = None
    tier: ResolutionTier = ResolutionTier.NONE
    trace: List[str] = field(default_factory=list)


def contains_keyword(text: str | None, keywords: tuple[str, ...]) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in keywords)


def extract_budgets(payload: Any) -> List[dict]:
    """Accept a bare list or an object wrapping the list under ``budgets``/``data``."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("budgets", "data"):
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


class BudgetResolver:
    """Resolve budget, activity and project for a booking description."""

    def __init__(
        self,
        api_client: DeptApiClient,
        *,
        default_budget_id: int | None = None,
        default_corporation_id: int | None = None,
        personal_keywords: tuple[str, ...] = PERSONAL_KEYWORDS,
        holiday_keywords: tuple[str, ...] = HOLIDAY_KEYWORDS,
    ) -> None:
        self._api = api_client
        self._default_budget_id = default_budget_id
        self._default_corporation_id = default_corporation_id
        self._personal_keywords = personal_keywords
        self._holiday_keywords = holiday_keywords

    async def resolve(
        self, description: str, corporation_id: int | None = None
    ) -> BudgetResolution:
        """Never raises; remote failures degrade to the next tier."""
        result = BudgetResolution()

        if contains_keyword(description, self._personal_keywords):
            await self._resolve_internal(description, result)

        if result.budget_id is None and description:
            await self._resolve_by_search(description, corporation_id, result)

        logger.debug("Resolved %r via %s tier: %s", description, result.tier.value, result.trace)
        return result

    async def _resolve_internal(self, description: str, result: BudgetResolution) -> None:
        try:
            candidates = extract_budgets(await self._api.search_internal_budgets(description))
            if not candidates:
                result.trace.append("internal: no candidates")
                return
            budget = Budget.model_validate(candidates[0])
            budget_id = int(budget.id)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Internal budget search failed for %r: %s", description, exc)
            result.trace.append(f"internal: {exc}")
            return

        result.budget_id = budget_id
        result.activity_id = budget.activity_id
        result.activity_name = budget.name
        result.project_id = budget.project_id
        result.project_name = budget.project_name
        result.company_id = budget.company_id
        result.corporation_id = budget.corporation_id
        result.is_vacation = contains_keyword(description, self._holiday_keywords)
        result.tier = ResolutionTier.INTERNAL
        result.trace.append(f"internal: budget {budget_id}")

    async def _resolve_by_search(
        self,
        description: str,
        corporation_id: int | None,
        result: BudgetResolution,
    ) -> None:
        try:
            matches = extract_budgets(
                await self._api.search_budgets(
                    description, corporation_id or self._default_corporation_id
                )
            )
            if matches:
                result.budget_id = int(matches[0]["id"])
                result.tier = ResolutionTier.SEARCH
                result.trace.append(f"search: budget {result.budget_id}")
                return
            result.trace.append("search: no matches")
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Budget search failed for %r: %s", description, exc)
            result.trace.append(f"search: {exc}")

        result.budget_id = self._default_budget_id
        if result.budget_id is not None:
            result.tier = ResolutionTier.DEFAULT
            result.trace.append(f"default: budget {result.budget_id}")


__all__ = [
    "BudgetResolution",
    "BudgetResolver",
    "HOLIDAY_KEYWORDS",
    "PERSONAL_KEYWORDS",
    "ResolutionTier",
    "contains_keyword",
    "extract_budgets",
]
