"""
Domain Entities

All domain entities organized by model.
"""

from .enums import AccountRole, OtpMode

from .account import Account
from .one_time_code import OneTimeCode
from .session import AccountSnapshot, SessionRecord

__all__ = [
    # Enums
    "AccountRole",
    "OtpMode",
    # Entities
    "Account",
    "OneTimeCode",
    "AccountSnapshot",
    "SessionRecord",
]
