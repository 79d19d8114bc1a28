# -*- coding: utf-8 -*-
"""Client — session controller (root state machine).

States and the transitions between them::

    LOADING ──no/invalid token──────────────▶ UNAUTHENTICATED
    LOADING / UNAUTHENTICATED ──me / login──▶ ONBOARDING | API_KEY_REQUIRED | ACTIVE
    ONBOARDING ──profile saved──────────────▶ API_KEY_REQUIRED | ACTIVE
    API_KEY_REQUIRED ──key saved────────────▶ ACTIVE
    any signed-in state ──logout / 401/403──▶ UNAUTHENTICATED

A signed-in user lands on the first unmet gate: no profile means ONBOARDING
(the key prompt waits until the profile is saved), then a missing Gemini key
means API_KEY_REQUIRED. The machine has no terminal state.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, List, Optional

from ..auth.models import MeResponse, UserData
from ..gemini.models import FoodCheckResult, FoodImage, MealPlan, Recipe
from ..profile.models import UserProfile
from ..symptoms.models import SymptomEntry
from .errors import ClientError, FormValidationError, SessionStateError
from .gateway import ApiGatewayClient
from .token_store import TokenStore

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    ONBOARDING = "onboarding"
    API_KEY_REQUIRED = "api_key_required"
    ACTIVE = "active"


SIGNED_IN_STATES = (SessionState.ONBOARDING, SessionState.API_KEY_REQUIRED, SessionState.ACTIVE)

TransitionListener = Callable[[SessionState, SessionState], None]


@dataclass
class Session:
    """In-memory session data. ``user`` is only meaningful with ``auth_token``."""

    auth_token: Optional[str] = None
    user: Optional[UserData] = None
    symptoms: List[SymptomEntry] = field(default_factory=list)


def state_for_user(user: UserData) -> SessionState:
    if user.profile is None:
        return SessionState.ONBOARDING
    if not user.has_api_key:
        return SessionState.API_KEY_REQUIRED
    return SessionState.ACTIVE


def _require_text(value: Optional[str], field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise FormValidationError(f"{field_name} is required.")
    return text


class SessionController:
    def __init__(self, gateway: ApiGatewayClient, token_store: TokenStore) -> None:
        self._gateway = gateway
        self._tokens = token_store
        self._state = SessionState.LOADING
        self._listeners: List[TransitionListener] = []
        self.session = Session()
        self.loading = False
        gateway.add_auth_failure_listener(self._on_auth_failure)

    # ---------- state ----------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[UserData]:
        return self.session.user

    @property
    def profile(self) -> Optional[UserProfile]:
        return self.session.user.profile if self.session.user else None

    @property
    def symptoms(self) -> List[SymptomEntry]:
        return list(self.session.symptoms)

    @property
    def sidebar_visible(self) -> bool:
        return self._state is SessionState.ACTIVE

    def subscribe(self, listener: TransitionListener) -> Callable[[], None]:
        """Call ``listener(previous, current)`` on every state change; returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, new_state: SessionState) -> None:
        previous = self._state
        self._state = new_state
        if previous is new_state:
            return
        logger.debug("session %s -> %s", previous.value, new_state.value)
        for listener in list(self._listeners):
            listener(previous, new_state)

    def _require(self, action: str, *states: SessionState) -> None:
        if self._state not in states:
            raise SessionStateError(f"Cannot {action} while the session is {self._state.value}.")

    @contextmanager
    def _busy(self) -> Iterator[None]:
        self.loading = True
        try:
            yield
        finally:
            self.loading = False

    def _teardown(self) -> None:
        self.session = Session()
        self._transition(SessionState.UNAUTHENTICATED)

    def _on_auth_failure(self, status_code: int) -> None:
        # The gateway has already cleared the stored token.
        logger.info("forced logout after HTTP %s", status_code)
        self._teardown()

    def _sign_in(self, token: str, data: MeResponse) -> SessionState:
        self.session = Session(auth_token=token, user=data.user, symptoms=list(data.symptoms))
        self._transition(state_for_user(data.user))
        return self._state

    # ---------- lifecycle ----------

    def start(self) -> SessionState:
        """Resolve LOADING by verifying any persisted token against /api/me."""
        self._require("start", SessionState.LOADING)
        token = self._tokens.get()
        if not token:
            self._transition(SessionState.UNAUTHENTICATED)
            return self._state
        try:
            with self._busy():
                data = self._gateway.fetch_me()
        except ClientError as exc:
            logger.info("stored token could not be verified: %s", exc.message)
            self._tokens.set(None)
            self._teardown()
            return self._state
        return self._sign_in(token, data)

    def register(self, email: str, password: str) -> str:
        self._require("register", SessionState.UNAUTHENTICATED)
        email = _require_text(email, "Email")
        _require_text(password, "Password")
        with self._busy():
            return self._gateway.register(email, password)

    def login(self, email: str, password: str) -> SessionState:
        self._require("log in", SessionState.UNAUTHENTICATED)
        email = _require_text(email, "Email")
        _require_text(password, "Password")
        with self._busy():
            data = self._gateway.login(email, password)
        self._tokens.set(data.token)
        return self._sign_in(data.token, data)

    def logout(self) -> None:
        self._tokens.set(None)
        self._teardown()

    # ---------- onboarding gates ----------

    def save_profile(self, profile: UserProfile) -> UserProfile:
        self._require("save a profile", SessionState.ONBOARDING, SessionState.API_KEY_REQUIRED, SessionState.ACTIVE)
        _require_text(profile.condition, "Condition")
        with self._busy():
            saved = self._gateway.save_profile(profile)
        user = self.session.user.model_copy(update={"profile": saved})
        self.session.user = user
        if self._state is SessionState.ONBOARDING:
            self._transition(state_for_user(user))
        return saved

    def save_api_key(self, api_key: str) -> str:
        self._require("save an API key", SessionState.API_KEY_REQUIRED, SessionState.ACTIVE)
        api_key = _require_text(api_key, "API key")
        with self._busy():
            message = self._gateway.save_api_key(api_key)
        self.session.user = self.session.user.model_copy(update={"has_api_key": True})
        self._transition(SessionState.ACTIVE)
        return message

    # ---------- active-session data ----------

    def add_symptom(self, entry: SymptomEntry) -> List[SymptomEntry]:
        self._require("log a symptom", SessionState.ACTIVE)
        _require_text(entry.symptom, "Symptom")
        with self._busy():
            symptoms = self._gateway.add_symptom(entry)
        self.session.symptoms = symptoms
        return list(symptoms)

    def generate_meal_plan(self) -> MealPlan:
        self._require("generate a meal plan", SessionState.ACTIVE)
        with self._busy():
            return self._gateway.generate_meal_plan(self.profile, self.session.symptoms)

    def check_food(self, food_name: str, food_image: Optional[FoodImage] = None) -> FoodCheckResult:
        self._require("check a food", SessionState.ACTIVE)
        food_name = _require_text(food_name, "Food name")
        with self._busy():
            return self._gateway.check_food(self.profile, food_name, food_image)

    def analyze_triggers(self) -> str:
        self._require("analyze triggers", SessionState.ACTIVE)
        with self._busy():
            return self._gateway.analyze_triggers(self.profile, self.session.symptoms)

    def suggest_recipe(self, request: str) -> Recipe:
        self._require("suggest a recipe", SessionState.ACTIVE)
        request = _require_text(request, "Recipe request")
        with self._busy():
            return self._gateway.suggest_recipe(self.profile, request)
