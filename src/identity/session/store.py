"""SessionStore — owns the authenticated-identity lifecycle.

State machine:
    Anonymous -> Authenticating -> Authenticated -> Anonymous

``login`` drives the first two transitions; ``logout`` and a gateway-reported
credential rejection (``invalidate``) drive the last. A failed login falls
back to Anonymous. Re-authenticating after an invalidation is a fresh
Authenticating transition.

Persisted keys: ``token``, ``refresh_token`` and ``user`` (the identity
record without credentials). Every storage write completes before the
triggering operation returns.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog
from pydantic import ValidationError as PydanticValidationError

from identity.api.schemas import AuthResponse, LoginRequest, SignupRequest
from identity.forms import validate_login, validate_signup
from identity.session.session import Session, SessionState, _utc_now
from identity.storage import KeyValueStore
from shared.errors import AuthError, NetworkError, ServerError
from shared.gateway import BackendGateway

logger = structlog.get_logger(__name__)

TOKEN_KEY = "token"
REFRESH_TOKEN_KEY = "refresh_token"
USER_KEY = "user"

LOGIN_FAILED_MESSAGE = "Login failed"
LOGIN_REQUIRED_MESSAGE = "Please login to continue"

SessionListener = Callable[[SessionState], None]


class SessionStore:
    """Owns the visitor's Session and its persisted credential.

    Other services read the Session through ``require_session`` and follow
    state changes through ``subscribe``; only this class writes the
    ``token``, ``refresh_token`` and ``user`` storage keys.
    """

    def __init__(self, gateway: BackendGateway, storage: KeyValueStore) -> None:
        self._gateway = gateway
        self._storage = storage
        self._session: Session | None = None
        self._state = SessionState.ANONYMOUS
        self._listeners: list[SessionListener] = []

        gateway.add_unauthorized_listener(self.invalidate)

    # -------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED and self._session is not None

    def require_session(self) -> Session:
        """Return the current Session or raise AuthError."""
        if not self.is_authenticated:
            raise AuthError(LOGIN_REQUIRED_MESSAGE)
        return self._session

    def subscribe(self, listener: SessionListener) -> None:
        """Call ``listener`` with the new state on every transition."""
        self._listeners.append(listener)

    def _transition(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        if state != SessionState.AUTHENTICATED:
            self._session = None
        if previous != state:
            logger.debug("Session state changed", previous=previous.value, current=state.value)
            for listener in list(self._listeners):
                listener(state)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def restore(self) -> SessionState:
        """Rebuild the session from durable storage without a network call.

        Both the credential and the identity record must be present and
        readable; a partial or corrupt session restores as Anonymous.
        """
        token = self._storage.get(TOKEN_KEY)
        record = self._storage.get(USER_KEY)

        if not token or not record:
            self._transition(SessionState.ANONYMOUS)
            return self._state

        try:
            if isinstance(record, str):
                session = Session.model_validate_json(record)
            else:
                session = Session.model_validate(record)
        except PydanticValidationError:
            logger.warning("Stored identity record is unreadable, staying anonymous")
            self._transition(SessionState.ANONYMOUS)
            return self._state

        session = session.model_copy(
            update={"token": token, "refresh_token": self._storage.get(REFRESH_TOKEN_KEY)}
        )
        if not session.is_valid:
            self._transition(SessionState.ANONYMOUS)
            return self._state

        self._session = session
        self._transition(SessionState.AUTHENTICATED)
        logger.info("Session restored", user_id=session.user_id)
        return self._state

    def login(self, email: str, password: str) -> Session:
        validate_login(email, password)

        self._transition(SessionState.AUTHENTICATING)
        try:
            body = self._gateway.login(LoginRequest(email=email, password=password).model_dump())
        except ServerError as exc:
            self._transition(SessionState.ANONYMOUS)
            logger.info("Login rejected", email=email, status_code=exc.status_code)
            raise AuthError(exc.message) from exc
        except (AuthError, NetworkError):
            self._transition(SessionState.ANONYMOUS)
            raise

        response = AuthResponse.model_validate(body) if isinstance(body, dict) else AuthResponse()
        user = response.user or {}
        user_id = response.inserted_id or user.get("user_id") or ""

        if not response.token or not user_id:
            self._transition(SessionState.ANONYMOUS)
            logger.info("Login response carried no credential", email=email)
            raise AuthError(LOGIN_FAILED_MESSAGE)

        now = _utc_now()
        session = Session(
            user_id=user_id,
            token=response.token,
            refresh_token=response.refresh_token,
            first_name=user.get("first_name") or "",
            last_name=user.get("last_name") or "",
            email=user.get("email") or email,
            phone=user.get("phone") or "",
            created_at=now,
            updated_at=now,
        )
        self._persist(session)

        self._session = session
        self._transition(SessionState.AUTHENTICATED)
        logger.info("Visitor logged in", user_id=session.user_id)
        return session

    def signup(self, profile: SignupRequest, confirm_password: str | None = None) -> str | None:
        """Create an account and return the backend's inserted id, if any.

        Does not authenticate; the caller logs in afterwards.
        """
        validate_signup(profile, confirm_password)

        body = self._gateway.signup(profile.model_dump())
        response = AuthResponse.model_validate(body) if isinstance(body, dict) else AuthResponse()

        logger.info("Account created", email=profile.email, inserted_id=response.inserted_id)
        return response.inserted_id

    def logout(self) -> None:
        """Forget the session and its persisted credential. Idempotent."""
        was_authenticated = self.is_authenticated
        self._clear_persisted()
        self._transition(SessionState.ANONYMOUS)
        if was_authenticated:
            logger.info("Visitor logged out")

    def invalidate(self) -> None:
        """React to the backend rejecting the credential."""
        if self._session is not None:
            logger.warning("Credential rejected by backend, signing out", user_id=self._session.user_id)
        self.logout()

    # -------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------
    def _persist(self, session: Session) -> None:
        self._storage.set(TOKEN_KEY, session.token)
        if session.refresh_token:
            self._storage.set(REFRESH_TOKEN_KEY, session.refresh_token)
        else:
            self._storage.remove(REFRESH_TOKEN_KEY)
        self._storage.set(USER_KEY, session.identity_record())

    def _clear_persisted(self) -> None:
        self._storage.remove(TOKEN_KEY)
        self._storage.remove(REFRESH_TOKEN_KEY)
        self._storage.remove(USER_KEY)
