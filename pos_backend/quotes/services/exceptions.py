# quotes/services/exceptions.py

"""
QUOTE SERVICE ERRORS
"""

from pos.services.exceptions import RegisterError


class QuoteError(RegisterError):
    """Base exception for quote store failures."""


class QuoteNotFoundError(QuoteError):
    pass


class QuoteNotPendingError(QuoteError):
    """Only pending quotes can be converted (converted is terminal, expired is final)."""
