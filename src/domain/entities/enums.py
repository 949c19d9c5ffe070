"""
Domain Enums

Enumeration types used across the authentication domain.
"""

from enum import Enum


class AccountRole(str, Enum):
    """Flat account role label"""

    user = "user"
    admin = "admin"


class OtpMode(str, Enum):
    """Why a one-time code was issued"""

    create = "CREATE"
    reset = "RESET"
