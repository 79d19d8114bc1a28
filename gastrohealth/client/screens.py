# -*- coding: utf-8 -*-
"""Client — feature screens.

Thin wrappers over the session controller. Each action toggles ``loading``,
reports failures through ``error`` (the inline banner) and keeps whatever the
screen showed before the failed call.
"""

from __future__ import annotations

import base64
import logging
import mimetypes
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..gemini.models import FoodCheckResult, FoodImage, MealPlan, Recipe
from ..symptoms.models import SymptomEntry
from .errors import ClientError, FormValidationError
from .session import SessionController

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Screen:
    title = ""

    def __init__(self, controller: SessionController) -> None:
        self.controller = controller
        self.loading = False
        self.error: Optional[str] = None

    def _run(self, action: Callable[..., T], *args: Any, **kwargs: Any) -> Optional[T]:
        self.loading = True
        self.error = None
        try:
            return action(*args, **kwargs)
        except ClientError as exc:
            logger.info("%s: %s", type(self).__name__, exc.message)
            self.error = exc.message
            return None
        finally:
            self.loading = False


class MealPlanScreen(Screen):
    title = "My meal plan"

    def __init__(self, controller: SessionController) -> None:
        super().__init__(controller)
        self.plan: Optional[MealPlan] = None

    def generate(self) -> Optional[MealPlan]:
        plan = self._run(self.controller.generate_meal_plan)
        if plan is not None:
            self.plan = plan
        return plan


def load_food_image(path: str | Path) -> FoodImage:
    image_path = Path(path).expanduser()
    mime, _ = mimetypes.guess_type(image_path.name)
    if not mime or not mime.startswith("image/"):
        raise FormValidationError(f"Unsupported image type: {image_path.name}")
    try:
        raw = image_path.read_bytes()
    except OSError as exc:
        raise FormValidationError(f"Cannot read image {image_path}: {exc.strerror}") from exc
    try:
        return FoodImage(mime_type=mime, data=base64.b64encode(raw).decode("ascii"))
    except PydanticValidationError as exc:
        raise FormValidationError(f"Unsupported image: {image_path.name}") from exc


class FoodCheckerScreen(Screen):
    title = "Food checker"

    def __init__(self, controller: SessionController) -> None:
        super().__init__(controller)
        self.result: Optional[FoodCheckResult] = None

    def check(self, food_name: str, image_path: str | Path | None = None) -> Optional[FoodCheckResult]:
        def action() -> FoodCheckResult:
            image = load_food_image(image_path) if image_path else None
            return self.controller.check_food(food_name, image)

        result = self._run(action)
        if result is not None:
            self.result = result
        return result


class SymptomLoggerScreen(Screen):
    title = "Symptom tracker"

    @property
    def symptoms(self) -> List[SymptomEntry]:
        return self.controller.symptoms

    def log(
        self,
        symptom: str,
        *,
        severity: int = 5,
        foods: Optional[List[str]] = None,
        notes: Optional[str] = None,
    ) -> Optional[List[SymptomEntry]]:
        def action() -> List[SymptomEntry]:
            if not (symptom or "").strip():
                raise FormValidationError("Symptom is required.")
            try:
                entry = SymptomEntry(
                    symptom=symptom.strip(),
                    severity=severity,
                    foods=[f.strip() for f in foods or [] if f.strip()],
                    notes=(notes or "").strip() or None,
                    date=datetime.now().astimezone().isoformat(timespec="seconds"),
                )
            except PydanticValidationError as exc:
                raise FormValidationError("Severity must be between 1 and 10.") from exc
            return self.controller.add_symptom(entry)

        return self._run(action)


class HealthReportScreen(Screen):
    title = "Health report"

    def __init__(self, controller: SessionController) -> None:
        super().__init__(controller)
        self.analysis: Optional[str] = None

    def analyze(self) -> Optional[str]:
        if not self.controller.symptoms:
            self.error = "Log a few symptoms first so there is something to analyze."
            return None
        analysis = self._run(self.controller.analyze_triggers)
        if analysis is not None:
            self.analysis = analysis
        return analysis


class RecipeLibraryScreen(Screen):
    title = "Recipe library"

    def __init__(self, controller: SessionController) -> None:
        super().__init__(controller)
        self.recipes: List[Recipe] = []

    def suggest(self, request: str) -> Optional[Recipe]:
        recipe = self._run(self.controller.suggest_recipe, request)
        if recipe is not None:
            self.recipes.insert(0, recipe)
        return recipe


@dataclass
class Reminder:
    label: str
    time: str  # HH:MM, local time
    enabled: bool = True


class RemindersScreen(Screen):
    """Local-only reminder list; nothing here touches the API."""

    title = "Reminders"

    def __init__(self, controller: SessionController) -> None:
        super().__init__(controller)
        self.reminders: List[Reminder] = []

    def add(self, label: str, time: str) -> Optional[Reminder]:
        def action() -> Reminder:
            text = (label or "").strip()
            if not text:
                raise FormValidationError("Reminder label is required.")
            try:
                at = datetime.strptime((time or "").strip(), "%H:%M")
            except ValueError as exc:
                raise FormValidationError("Time must look like HH:MM.") from exc
            reminder = Reminder(label=text, time=at.strftime("%H:%M"))
            self.reminders.append(reminder)
            self.reminders.sort(key=lambda r: r.time)
            return reminder

        return self._run(action)

    def toggle(self, index: int) -> None:
        self.reminders[index].enabled = not self.reminders[index].enabled

    def remove(self, index: int) -> None:
        del self.reminders[index]
