"""Classification of collaborator failures.

Failures raised by the document store arrive either as typed
``DocumentStoreError`` subclasses or as arbitrary SDK errors carrying a
``code`` attribute and a message. They are mapped here, at the resolver
boundary, into the closed set of onboarding reasons.
"""

from __future__ import annotations

from tenancy.domain.value_objects import OnboardingReason
from tenancy.ports.exceptions import NetworkUnreachableError, PermissionDeniedError

_NETWORK_CODES = frozenset(
    {
        "unavailable",
        "client-offline",
        "network-request-failed",
        "auth/network-request-failed",
        "deadline-exceeded",
    }
)
_NETWORK_MESSAGE_MARKERS = (
    "client is offline",
    "could not reach",
    "err_connection_closed",
    "webchannelconnection",
    "network",
)
_PERMISSION_CODES = frozenset({"forbidden-role"})
_PERMISSION_MARKER = "permission-denied"


def classify_failure(error: BaseException) -> OnboardingReason:
    """Map a collaborator failure to an onboarding reason.

    Args:
        error: The exception raised by a collaborator call

    Returns:
        NETWORK_UNREACHABLE or PERMISSION_DENIED when the failure carries a
        recognised signature, UNKNOWN otherwise
    """
    if isinstance(error, NetworkUnreachableError):
        return OnboardingReason.NETWORK_UNREACHABLE
    if isinstance(error, PermissionDeniedError):
        return OnboardingReason.PERMISSION_DENIED

    code = str(getattr(error, "code", None) or "").lower()
    message = str(error).lower()

    if code in _PERMISSION_CODES or _PERMISSION_MARKER in code or _PERMISSION_MARKER in message:
        return OnboardingReason.PERMISSION_DENIED
    if code in _NETWORK_CODES or any(marker in message for marker in _NETWORK_MESSAGE_MARKERS):
        return OnboardingReason.NETWORK_UNREACHABLE
    if isinstance(error, (ConnectionError, TimeoutError)):
        return OnboardingReason.NETWORK_UNREACHABLE
    return OnboardingReason.UNKNOWN
