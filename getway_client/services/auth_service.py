"""
Login, registration, logout and profile refresh over the API client and token store.
"""

from __future__ import annotations

import re
from typing import Any

from getway_client.domains.errors import (
    ApiError,
    HttpStatusError,
    LoginFailed,
    ProfileFetchFailed,
    RegistrationFailed,
)
from getway_client.domains.models import ApiResponse, AuthSession, UserRecord, UserRole
from getway_client.infrastructure.api.api_client import ApiClient
from getway_client.infrastructure.storage.token_store import TokenStore
from getway_client.utils.logger import get_logger

logger = get_logger()

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any) -> int | None:
    """
    Integer prefix of a form value, like JavaScript's parseInt.

    "25" -> 25, " 3 cars" -> 3, "abc" -> None, "" -> None. None means the
    field is absent, never zero.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value else None
    m = _LEADING_INT.match(str(value))
    return int(m.group(1)) if m else None


def _compact(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def build_register_payload(fields: dict[str, Any]) -> dict[str, Any]:
    """Map flat sign-up form fields to the nested body POST /auth/register expects."""
    vehicles = fields.get("vehicleOwnership")
    vehicle_ownership = None
    if vehicles:
        vehicle_ownership = _compact({
            "cars": parse_int(vehicles.get("cars")),
            "twoWheelers": parse_int(vehicles.get("twoWheelers")),
            "cycles": parse_int(vehicles.get("cycles")),
        })

    profile = _compact({
        "age": parse_int(fields.get("age")) if fields.get("age") else None,
        "gender": fields.get("gender"),
        "occupation": fields.get("occupation"),
        "householdSize": parse_int(fields.get("householdSize")) if fields.get("householdSize") else None,
        "incomeRange": fields.get("incomeRange"),
        "vehicleOwnership": vehicle_ownership,
        "usesPublicTransport": fields.get("usesPublicTransport"),
    })

    return _compact({
        "name": fields.get("name"),
        "email": fields.get("email"),
        "password": fields.get("password"),
        "phone": fields.get("phone"),
        "role": fields.get("role") or UserRole.CUSTOMER.value,
        "organizationId": fields.get("organizationId"),
        "profile": profile,
    })


class AuthService:
    """
    Compound auth operations. Construct one per application and pass it to
    whatever needs it; it holds no state beyond its collaborators.
    """

    def __init__(self, api: ApiClient, token_store: TokenStore) -> None:
        self._api = api
        self._tokens = token_store

    def _session_from(self, response: ApiResponse, error_cls: type, fallback: str) -> AuthSession:
        if not response.ok or not response.data:
            raise error_cls(response.message or fallback)
        data = response.data
        try:
            user_raw = data.get("user")
            user = UserRecord.from_dict(user_raw) if user_raw is not None else None
        except (AttributeError, TypeError, ValueError) as e:
            raise error_cls("Unexpected response from server", e) from e
        token = data.get("token") or None
        return AuthSession(token=token, user=user)

    def _store(self, session: AuthSession) -> None:
        # User first: a token must never sit next to another account's user.
        # If either write fails, drop the whole session rather than leave half of it.
        try:
            if session.user is not None:
                self._tokens.set_user(session.user)
            self._tokens.set_token(session.token)
        except Exception:
            logger.error("Could not persist session; clearing local session")
            self._tokens.clear_all()
            raise

    def login(self, email: str, password: str) -> AuthSession:
        """
        Authenticate and persist the session.

        Raises:
            LoginFailed: Rejected credentials, malformed response or transport
                failure (the original error is kept as `original`).
        """
        try:
            response = self._api.post(
                "/auth/login",
                {"email": email, "password": password},
                include_auth=False,
            )
        except ApiError as e:
            logger.warning("Login error: %s", e.message)
            raise LoginFailed(e.message, e) from e

        session = self._session_from(response, LoginFailed, "Login failed")
        if not session.token:
            raise LoginFailed("Unexpected response from server")
        self._store(session)
        logger.info("Logged in as %s", session.user.email if session.user else email)
        return session

    def register(self, fields: dict[str, Any]) -> AuthSession:
        """
        Create an account. The session is stored only when the server issued a
        token; scientists awaiting approval get a user but no token.

        Raises:
            RegistrationFailed: Server rejected the data or the request failed.
        """
        payload = build_register_payload(fields)
        try:
            response = self._api.post("/auth/register", payload, include_auth=False)
        except ApiError as e:
            logger.warning("Registration error: %s", e.message)
            raise RegistrationFailed(e.message, e) from e

        session = self._session_from(response, RegistrationFailed, "Registration failed")
        if session.token:
            self._store(session)
        else:
            logger.info("Registration accepted without a session (approval pending)")
        return session

    def logout(self) -> None:
        """Tell the server (best effort), then always clear the local session."""
        try:
            if self._tokens.get_token():
                self._api.post("/auth/logout")
        except ApiError as e:
            logger.warning("Logout API error, clearing local session anyway: %s", e.message)
        finally:
            self._tokens.clear_all()

    def get_profile(self) -> UserRecord:
        """
        Fetch the current user and overwrite the cached copy.

        Raises:
            ProfileFetchFailed: The request failed or returned no user. The
                cached user is left untouched.
        """
        try:
            response = self._api.get("/auth/profile")
        except ApiError as e:
            logger.warning("Get profile error: %s", e.message)
            raise ProfileFetchFailed(e.message, e) from e

        if not response.ok or not response.data:
            raise ProfileFetchFailed(response.message or None)
        try:
            user = UserRecord.from_dict(response.data.get("user"))
        except (AttributeError, TypeError, ValueError) as e:
            raise ProfileFetchFailed("Unexpected response from server", e) from e
        self._tokens.set_user(user)
        return user

    def refresh_user_data(self) -> UserRecord:
        return self.get_profile()

    def verify_token(self) -> bool:
        """
        Ask the server whether the stored token is still valid. A 401 ends the
        local session; other failures propagate.
        """
        if not self._tokens.get_token():
            return False
        try:
            response = self._api.get("/auth/verify-token")
        except HttpStatusError as e:
            if e.is_unauthorized:
                logger.info("Server rejected stored token; clearing session")
                self._tokens.clear_all()
                return False
            raise
        return response.ok

    def is_authenticated(self) -> bool:
        """Local check only; the server may still reject the token."""
        return bool(self._tokens.get_token())

    def get_current_user(self) -> UserRecord | None:
        return self._tokens.get_user()
