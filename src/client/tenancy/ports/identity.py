"""Identity provider port.

The identity provider owns credential verification and token issuance.
The session engine only observes sign-in/sign-out transitions and asks
the provider to sign the user out.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class ProviderUser(Protocol):
    """Raw user object emitted by the identity provider."""

    @property
    def uid(self) -> str: ...

    @property
    def email(self) -> str | None: ...

    @property
    def display_name(self) -> str | None: ...


Unsubscribe = Callable[[], None]


@runtime_checkable
class IIdentityProvider(Protocol):
    """External identity provider.

    Implementations wrap a concrete provider SDK. Failures are raised as
    ``IdentityProviderError``.
    """

    def subscribe(self, on_change: Callable[[ProviderUser | None], None]) -> Unsubscribe:
        """Register a callback for sign-in/sign-out transitions.

        The callback receives the signed-in user, or None after sign-out.

        Returns:
            A callable that removes the registration
        """
        ...

    async def sign_out(self) -> None:
        """Sign the current user out."""
        ...

    async def sign_in_with_password(self, email: str, password: str) -> ProviderUser:
        """Sign in with email and password credentials."""
        ...

    async def sign_in_with_provider(self) -> ProviderUser:
        """Sign in through the provider's federated login flow."""
        ...

    async def register(self, email: str, password: str, display_name: str) -> ProviderUser:
        """Create an account and sign it in."""
        ...
