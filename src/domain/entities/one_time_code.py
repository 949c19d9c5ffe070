"""
OneTimeCode

Ephemeral verification secret owned by a single flow instance. Never persisted.
"""

from datetime import datetime

from pydantic import BaseModel

from .enums import OtpMode


class OneTimeCode(BaseModel):
    code: str
    target_email: str
    issued_at: datetime
    mode: OtpMode
