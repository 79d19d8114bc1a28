# -*- coding: utf-8 -*-
"""Client — API gateway: the single choke point for calls to the GastroHealth API.

Every call carries ``Content-Type: application/json`` and, when a token is
stored, ``Authorization: Bearer <token>``. Responses are handled uniformly:

* 401/403: the token is cleared, auth-failure listeners fire (forced logout)
  and AuthenticationError is raised. Never retried.
* other non-2xx: RequestError with the body's ``error`` text, or a generic
  message for the status code.
* 2xx: the JSON body validated into the caller's model.

There are no retries and no client-side timeout.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..auth.models import LoginResponse, MeResponse, MessageResponse
from ..config import settings
from ..gemini.models import FoodCheckResult, FoodImage, MealPlan, Recipe, TriggerAnalysis
from ..profile.models import UserProfile
from ..symptoms.models import SymptomEntry
from .errors import AuthenticationError, RequestError
from .token_store import TokenStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

AuthFailureListener = Callable[[int], None]

_SYMPTOM_LIST = TypeAdapter(List[SymptomEntry])

_GENERIC_MESSAGES = {
    400: "The request was invalid.",
    401: "Your session has expired. Please log in again.",
    403: "Your session has expired. Please log in again.",
    404: "The requested resource was not found.",
    429: "Too many requests. Please try again later.",
    500: "The server encountered an error.",
    502: "The AI service is unavailable right now.",
    503: "The server is temporarily unavailable.",
}
NETWORK_ERROR_MESSAGE = "Cannot reach the server. Check your connection and try again."
BAD_RESPONSE_MESSAGE = "Unknown error from server."


def error_message_for(resp: httpx.Response) -> str:
    """Prefer the server's ``error`` text; fall back to a message for the status."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "detail", "message"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return _GENERIC_MESSAGES.get(resp.status_code, f"HTTP error: {resp.status_code}")


def _dump(obj: BaseModel) -> Dict[str, Any]:
    return obj.model_dump(by_alias=True, mode="json", exclude_none=True)


class ApiGatewayClient:
    def __init__(
        self,
        token_store: TokenStore,
        *,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._tokens = token_store
        self._owns_http = http_client is None
        # No client-side timeout.
        self._http = http_client or httpx.Client(
            base_url=(base_url or settings.api_base_url).rstrip("/"),
            timeout=None,
            follow_redirects=True,
        )
        self._auth_failure_listeners: List[AuthFailureListener] = []

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "ApiGatewayClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add_auth_failure_listener(self, listener: AuthFailureListener) -> None:
        self._auth_failure_listeners.append(listener)

    # ---------- plumbing ----------

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._tokens.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _force_logout(self, status_code: int) -> None:
        if self._tokens.get():
            logger.warning("API rejected the session (HTTP %s); logging out", status_code)
        self._tokens.set(None)
        for listener in list(self._auth_failure_listeners):
            listener(status_code)

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        try:
            resp = self._http.request(method, path, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise RequestError(NETWORK_ERROR_MESSAGE) from exc

        if resp.status_code in (401, 403):
            message = error_message_for(resp)
            self._force_logout(resp.status_code)
            raise AuthenticationError(message, status_code=resp.status_code)
        if not resp.is_success:
            message = error_message_for(resp)
            logger.warning("%s %s -> HTTP %s: %s", method, path, resp.status_code, message)
            raise RequestError(message, status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise RequestError(BAD_RESPONSE_MESSAGE, status_code=resp.status_code) from exc

    def _call(self, model: Type[M], method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> M:
        data = self._request(method, path, payload)
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            logger.warning("%s %s returned an unexpected body: %s", method, path, exc)
            raise RequestError(BAD_RESPONSE_MESSAGE) from exc

    # ---------- auth ----------

    def register(self, email: str, password: str) -> str:
        return self._call(MessageResponse, "POST", "/api/register", {"email": email, "password": password}).message

    def login(self, email: str, password: str) -> LoginResponse:
        return self._call(LoginResponse, "POST", "/api/login", {"email": email, "password": password})

    def fetch_me(self) -> MeResponse:
        return self._call(MeResponse, "GET", "/api/me")

    def save_api_key(self, api_key: str) -> str:
        return self._call(MessageResponse, "POST", "/api/api-key", {"apiKey": api_key}).message

    # ---------- profile & symptoms ----------

    def save_profile(self, profile: UserProfile) -> UserProfile:
        return self._call(UserProfile, "POST", "/api/profile", {"profile": _dump(profile)})

    def add_symptom(self, symptom: SymptomEntry) -> List[SymptomEntry]:
        data = self._request("POST", "/api/symptoms", {"symptom": _dump(symptom)})
        try:
            return _SYMPTOM_LIST.validate_python(data)
        except PydanticValidationError as exc:
            raise RequestError(BAD_RESPONSE_MESSAGE) from exc

    # ---------- Gemini proxy ----------

    def generate_meal_plan(self, profile: UserProfile, symptoms: List[SymptomEntry]) -> MealPlan:
        payload = {"profile": _dump(profile), "symptoms": [_dump(s) for s in symptoms]}
        return self._call(MealPlan, "POST", "/api/gemini/meal-plan", payload)

    def check_food(
        self,
        profile: UserProfile,
        food_name: str,
        food_image: Optional[FoodImage] = None,
    ) -> FoodCheckResult:
        payload: Dict[str, Any] = {"profile": _dump(profile), "foodName": food_name}
        if food_image is not None:
            payload["foodImage"] = _dump(food_image)
        return self._call(FoodCheckResult, "POST", "/api/gemini/check-food", payload)

    def analyze_triggers(self, profile: UserProfile, symptoms: List[SymptomEntry]) -> str:
        payload = {"profile": _dump(profile), "symptoms": [_dump(s) for s in symptoms]}
        return self._call(TriggerAnalysis, "POST", "/api/gemini/analyze-triggers", payload).analysis

    def suggest_recipe(self, profile: UserProfile, request: str) -> Recipe:
        payload = {"profile": _dump(profile), "request": request}
        return self._call(Recipe, "POST", "/api/gemini/suggest-recipe", payload)
