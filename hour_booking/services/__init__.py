"""Service layer exports."""

from .access_tokens import AccessTokenProvider, AuthenticationRequired
from .bookings import BookingNotFoundError, BookingRuleError, BookingService, generate_dates
from .budget_resolver import BudgetResolution, BudgetResolver, ResolutionTier
from .credential_cache import CredentialCache
from .token_cipher import CredentialCipher

__all__ = [
    "AccessTokenProvider",
    "AuthenticationRequired",
    "BookingNotFoundError",
    "BookingRuleError",
    "BookingService",
    "BudgetResolution",
    "BudgetResolver",
    "CredentialCache",
    "CredentialCipher",
    "ResolutionTier",
    "generate_dates",
]
