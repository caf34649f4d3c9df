"""Collaborator exceptions for the tenancy bounded context.

Adapters for the identity provider and the document store raise these
exceptions. The tenant resolver classifies them (together with any
untyped failure) into onboarding errors at its boundary.
"""


class DocumentStoreError(Exception):
    """Raised when the remote document store fails to serve a read.

    Adapters should set ``code`` to the store's error code when one is
    available so that the failure can be classified.
    """

    def __init__(self, message: str, code: str | None = None):
        self.code = code
        super().__init__(message)


class NetworkUnreachableError(DocumentStoreError):
    """Raised when the document store cannot be reached.

    The client is offline or the backend did not answer within the
    store's own timeout and retry policy.
    """

    def __init__(self, message: str = "Document store unreachable", code: str | None = "unavailable"):
        super().__init__(message, code=code)


class PermissionDeniedError(DocumentStoreError):
    """Raised when the document store rejects a read for the current identity.

    Indicates the store's security rules denied access. The session engine
    never retries such reads.
    """

    def __init__(self, message: str = "Permission denied", code: str | None = "permission-denied"):
        super().__init__(message, code=code)


class IdentityProviderError(Exception):
    """Raised when the identity provider fails a sign-in, sign-out or register call.

    The provider owns its own retry policy; the session engine only logs
    and surfaces these failures.
    """

    def __init__(self, message: str, code: str | None = None):
        self.code = code
        super().__init__(message)
