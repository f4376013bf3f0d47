"""
Authentication module for administrator sign-in.

Administrators authenticate against an identity provider: either a local
account registry (default) or a Supabase project. Every established session
carries an Identity whose role claim is resolved once, at sign-in, and
read back unchanged by every later check. Professionals and patients pick
their dashboard without signing in.
"""

import hashlib
import logging
import secrets
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from core.session import SessionManager
from use_cases.scheduling.domain.models import UserRole

logger = logging.getLogger(__name__)


# =============================================================================
# MODELS
# =============================================================================

class LoginRequest(BaseModel):
    """Login / sign-up request model."""
    email: str
    password: str


class AuthResponse(BaseModel):
    """Response of the authentication endpoints."""
    success: bool
    message: str
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class Identity:
    """An authenticated user and the role claim granted at sign-in."""
    user_id: str
    email: str
    role: UserRole = UserRole.ADMIN

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.user_id, "email": self.email, "role": self.role.value}


@dataclass
class AuthResult:
    """
    Outcome of an identity provider call.

    On success ``identity`` is set; ``provider_token`` is set when the
    provider issued its own access token. Sign-up may succeed without an
    identity when the provider requires email confirmation first.
    """
    success: bool
    message: str
    identity: Optional[Identity] = None
    provider_token: Optional[str] = None


# =============================================================================
# PASSWORD UTILITIES
# =============================================================================

def hash_password(password: str, salt: Optional[str] = None) -> str:
    """
    Hash a password using SHA-256 with a per-account salt.

    Returns ``"<salt>$<hexdigest>"``.
    """
    salt = salt or secrets.token_hex(8)
    digest = hashlib.sha256((salt + password).encode()).hexdigest()
    return f"{salt}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    salt, _, _ = password_hash.partition("$")
    return secrets.compare_digest(hash_password(password, salt), password_hash)


def resolve_role(claims: Optional[Dict[str, Any]]) -> UserRole:
    """
    Role claim of a signed-in user.

    An explicit ``role`` claim naming a known role wins; any other signed-in
    user is an administrator, since only administrators sign in.
    """
    role = (claims or {}).get("role")
    if role in {r.value for r in UserRole}:
        return UserRole(role)
    return UserRole.ADMIN


# =============================================================================
# IDENTITY PROVIDERS
# =============================================================================

class IdentityProvider(ABC):
    """External authority that signs users in, up and out."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthResult:
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthResult:
        pass

    @abstractmethod
    async def sign_out(self, provider_token: Optional[str]) -> AuthResult:
        pass


class LocalIdentityProvider(IdentityProvider):
    """
    In-process account registry.

    Accounts live in memory and are lost on restart, except the seed
    administrator passed to the constructor.
    """

    def __init__(self, seed_email: Optional[str] = None, seed_password: Optional[str] = None):
        self._accounts: Dict[str, Dict[str, str]] = {}
        if seed_email and seed_password:
            self._register(seed_email, seed_password)

    def _register(self, email: str, password: str) -> Dict[str, str]:
        account = {
            "id": str(uuid.uuid4()),
            "email": email,
            "password_hash": hash_password(password),
        }
        self._accounts[email.strip().lower()] = account
        return account

    async def sign_in(self, email: str, password: str) -> AuthResult:
        account = self._accounts.get(email.strip().lower())
        if not account or not verify_password(password, account["password_hash"]):
            return AuthResult(success=False, message="Invalid login credentials")

        return AuthResult(
            success=True,
            message="Login successful!",
            identity=Identity(user_id=account["id"], email=account["email"], role=resolve_role(None)),
        )

    async def sign_up(self, email: str, password: str) -> AuthResult:
        if email.strip().lower() in self._accounts:
            return AuthResult(success=False, message="User already registered")
        if len(password) < 6:
            return AuthResult(success=False, message="Password should be at least 6 characters")

        account = self._register(email, password)
        return AuthResult(
            success=True,
            message="Registration successful!",
            identity=Identity(user_id=account["id"], email=account["email"], role=resolve_role(None)),
        )

    async def sign_out(self, provider_token: Optional[str]) -> AuthResult:
        return AuthResult(success=True, message="Signed out successfully.")


class SupabaseIdentityProvider(IdentityProvider):
    """
    Supabase Auth (GoTrue) over its REST API.

    Calls are made once, with no timeout and no retry. A missing URL or key
    is logged when the provider is built; the service keeps running and
    every call then answers with a "not configured" message.
    """

    NOT_CONFIGURED = "Identity provider is not configured."

    def __init__(self, url: str, anon_key: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._url = url.rstrip("/")
        self._anon_key = anon_key
        self._transport = transport
        if not self.configured:
            logger.error("Supabase URL or anon key is not defined in environment variables.")

    @property
    def configured(self) -> bool:
        return bool(self._url and self._anon_key)

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {"apikey": self._anon_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"Authentication failed ({response.status_code})"
        return (
            body.get("error_description")
            or body.get("msg")
            or body.get("message")
            or body.get("error")
            or f"Authentication failed ({response.status_code})"
        )

    @staticmethod
    def _identity_from_user(user: Dict[str, Any]) -> Identity:
        return Identity(
            user_id=user.get("id", ""),
            email=user.get("email", ""),
            role=resolve_role(user.get("app_metadata")),
        )

    async def _post(self, path: str, payload: Optional[Dict[str, Any]] = None,
                    access_token: Optional[str] = None) -> httpx.Response:
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            return await client.post(
                f"{self._url}{path}",
                json=payload or {},
                headers=self._headers(access_token),
            )

    async def sign_in(self, email: str, password: str) -> AuthResult:
        if not self.configured:
            return AuthResult(success=False, message=self.NOT_CONFIGURED)
        try:
            response = await self._post(
                "/auth/v1/token?grant_type=password",
                {"email": email, "password": password},
            )
        except httpx.HTTPError as e:
            logger.error(f"Authentication error: {e}")
            return AuthResult(success=False, message=f"Authentication service unavailable: {e}")

        if response.status_code >= 400:
            return AuthResult(success=False, message=self._error_message(response))

        body = response.json()
        return AuthResult(
            success=True,
            message="Login successful!",
            identity=self._identity_from_user(body.get("user") or {}),
            provider_token=body.get("access_token"),
        )

    async def sign_up(self, email: str, password: str) -> AuthResult:
        if not self.configured:
            return AuthResult(success=False, message=self.NOT_CONFIGURED)
        try:
            response = await self._post("/auth/v1/signup", {"email": email, "password": password})
        except httpx.HTTPError as e:
            logger.error(f"Authentication error: {e}")
            return AuthResult(success=False, message=f"Authentication service unavailable: {e}")

        if response.status_code >= 400:
            return AuthResult(success=False, message=self._error_message(response))

        body = response.json()
        if not body.get("access_token"):
            # Email confirmation pending: no session yet
            return AuthResult(
                success=True,
                message="Registration successful! Check your email to confirm.",
            )

        return AuthResult(
            success=True,
            message="Registration successful!",
            identity=self._identity_from_user(body.get("user") or {}),
            provider_token=body.get("access_token"),
        )

    async def sign_out(self, provider_token: Optional[str]) -> AuthResult:
        if not self.configured:
            return AuthResult(success=False, message=self.NOT_CONFIGURED)
        if not provider_token:
            return AuthResult(success=True, message="Signed out successfully.")
        try:
            response = await self._post("/auth/v1/logout", access_token=provider_token)
        except httpx.HTTPError as e:
            logger.error(f"Sign-out error: {e}")
            return AuthResult(success=False, message=f"Error signing out: {e}")

        if response.status_code >= 400:
            return AuthResult(success=False, message=f"Error signing out: {self._error_message(response)}")
        return AuthResult(success=True, message="Signed out successfully.")


def get_identity_provider(settings) -> IdentityProvider:
    """Build the identity provider selected in settings."""
    if settings.identity_provider == "supabase":
        return SupabaseIdentityProvider(settings.supabase_url, settings.supabase_anon_key)
    if settings.identity_provider != "local":
        logger.error(f"Unknown identity provider '{settings.identity_provider}', using local accounts")
    return LocalIdentityProvider(settings.admin_email, settings.admin_password)


# =============================================================================
# AUTH SERVICE
# =============================================================================

class AuthService:
    """Ties an identity provider to the in-memory session registry."""

    def __init__(self, provider: IdentityProvider, sessions: Optional[SessionManager] = None):
        self.provider = provider
        self.sessions = sessions or SessionManager()

    def _response(self, result: AuthResult) -> AuthResponse:
        if not result.success or result.identity is None:
            return AuthResponse(success=result.success, message=result.message)

        session = self.sessions.create(result.identity, provider_token=result.provider_token)
        logger.info(f"Session established for user {result.identity.user_id} ({result.identity.role.value})")
        return AuthResponse(
            success=True,
            message=result.message,
            token=session.token,
            user=result.identity.to_dict(),
        )

    async def login(self, email: str, password: str) -> AuthResponse:
        result = await self.provider.sign_in(email, password)
        if not result.success:
            logger.info(f"Login failed for {email}: {result.message}")
        return self._response(result)

    async def signup(self, email: str, password: str) -> AuthResponse:
        result = await self.provider.sign_up(email, password)
        if not result.success:
            logger.info(f"Sign-up failed for {email}: {result.message}")
        return self._response(result)

    async def logout(self, token: Optional[str]) -> AuthResponse:
        session = self.sessions.get(token)
        if session is None:
            return AuthResponse(success=True, message="No active session")

        result = await self.provider.sign_out(session.provider_token)
        # The local session ends even when the provider call fails
        self.sessions.delete(token)
        return AuthResponse(success=result.success, message=result.message)

    def identity_for(self, token: Optional[str]) -> Optional[Identity]:
        session = self.sessions.get(token)
        return session.identity if session else None
