"""
Authentication Use Cases

Account lookup, one-time codes, credentials, sessions and the flow that ties them.
"""

from .account_directory import AccountDirectory
from .otp_challenge_manager import OtpChallengeManager
from .credential_verifier import CredentialVerifier
from .session_manager import SessionManager
from .auth_flow_controller import AuthFlowController
from .dtos import AccountInfo, ErrorInfo, FlowResponse, FlowStateInfo, SessionInfo

__all__ = [
    # Services
    "AccountDirectory",
    "OtpChallengeManager",
    "CredentialVerifier",
    "SessionManager",
    # Flow
    "AuthFlowController",
    # DTOs
    "AccountInfo",
    "ErrorInfo",
    "FlowResponse",
    "FlowStateInfo",
    "SessionInfo",
]
