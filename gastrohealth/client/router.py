# -*- coding: utf-8 -*-
"""Client — view router for the signed-in area."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple, Type

from .errors import SessionStateError
from .screens import (
    FoodCheckerScreen,
    HealthReportScreen,
    MealPlanScreen,
    RecipeLibraryScreen,
    RemindersScreen,
    Screen,
    SymptomLoggerScreen,
)
from .session import SessionController, SessionState


class View(str, Enum):
    MEAL_PLAN = "mealPlan"
    FOOD_CHECKER = "foodChecker"
    SYMPTOM_LOGGER = "symptomLogger"
    HEALTH_REPORT = "healthReport"
    RECIPE_LIBRARY = "recipeLibrary"
    REMINDERS = "reminders"


DEFAULT_VIEW = View.MEAL_PLAN

SCREENS: Dict[View, Type[Screen]] = {
    View.MEAL_PLAN: MealPlanScreen,
    View.FOOD_CHECKER: FoodCheckerScreen,
    View.SYMPTOM_LOGGER: SymptomLoggerScreen,
    View.HEALTH_REPORT: HealthReportScreen,
    View.RECIPE_LIBRARY: RecipeLibraryScreen,
    View.REMINDERS: RemindersScreen,
}

# Sidebar order.
NAV_ITEMS: List[Tuple[View, str]] = [(view, screen.title) for view, screen in SCREENS.items()]


class ViewRouter:
    """Chooses the feature screen to show. Only reachable while ACTIVE.

    Screen instances are kept per view so their state survives switching;
    they are all dropped when the session ends.
    """

    def __init__(self, controller: SessionController) -> None:
        self._controller = controller
        self.current: View = DEFAULT_VIEW
        self.drawer_open = False
        self._screens: Dict[View, Screen] = {}
        self._unsubscribe = controller.subscribe(self._on_transition)

    def close(self) -> None:
        """Stop following the session and drop cached screens."""
        self._unsubscribe()
        self._screens.clear()

    @property
    def sidebar_visible(self) -> bool:
        return self._controller.sidebar_visible

    def _require_active(self) -> None:
        if self._controller.state is not SessionState.ACTIVE:
            raise SessionStateError("Feature screens are only available once setup is complete.")

    def navigate(self, view: View | str) -> View:
        self._require_active()
        self.current = View(view)
        self.drawer_open = False
        return self.current

    def toggle_drawer(self) -> bool:
        self._require_active()
        self.drawer_open = not self.drawer_open
        return self.drawer_open

    def resolve(self) -> Optional[Screen]:
        if self._controller.state is not SessionState.ACTIVE or self._controller.profile is None:
            return None
        screen = self._screens.get(self.current)
        if screen is None:
            screen = SCREENS[self.current](self._controller)
            self._screens[self.current] = screen
        return screen

    def _on_transition(self, previous: SessionState, current: SessionState) -> None:
        if current is SessionState.UNAUTHENTICATED:
            self._screens.clear()
            self.current = DEFAULT_VIEW
            self.drawer_open = False
