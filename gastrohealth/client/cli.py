# -*- coding: utf-8 -*-
"""
Command-line client for the GastroHealth API.

Usage:
    gastrohealth register you@example.com
    gastrohealth login you@example.com
    gastrohealth profile --condition IBS --goal "reduce bloating"
    gastrohealth api-key <GEMINI_KEY>
    gastrohealth symptom bloating --severity 6 --food milk
    gastrohealth meal-plan | check-food <name> | analyze | recipe <request>
    gastrohealth status | symptoms | logout
    gastrohealth serve
"""

from __future__ import annotations

import argparse
import getpass
import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Sequence

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..profile.models import UserProfile
from .errors import ClientError
from .gateway import ApiGatewayClient
from .router import View, ViewRouter
from .screens import Screen
from .session import SIGNED_IN_STATES, SessionController, SessionState
from .token_store import FileTokenStorage, TokenStore

_NEXT_STEP = {
    SessionState.UNAUTHENTICATED: "Not logged in. Run 'gastrohealth login <email>'.",
    SessionState.ONBOARDING: "Complete your profile: 'gastrohealth profile --condition <condition>'.",
    SessionState.API_KEY_REQUIRED: "Add your Gemini API key: 'gastrohealth api-key <key>'.",
}


def _print_json(value: Any) -> None:
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True, mode="json", exclude_none=True)
    elif isinstance(value, list):
        value = [v.model_dump(by_alias=True, mode="json", exclude_none=True) if isinstance(v, BaseModel) else v for v in value]
    print(json.dumps(value, ensure_ascii=False, indent=2))


def _password(args: argparse.Namespace) -> str:
    return args.password if args.password is not None else getpass.getpass("Password: ")


@contextmanager
def _session(args: argparse.Namespace) -> Iterator[SessionController]:
    tokens = TokenStore(FileTokenStorage(Path(args.token_path)))
    with ApiGatewayClient(tokens, base_url=args.base_url) as gateway:
        controller = SessionController(gateway, tokens)
        controller.start()
        yield controller


def _require_state(controller: SessionController, *states: SessionState) -> bool:
    if controller.state in states:
        return True
    print(_NEXT_STEP.get(controller.state, f"Session is {controller.state.value}."), file=sys.stderr)
    return False


def _run_screen(controller: SessionController, view: View, action: Callable[[Screen], Any]) -> int:
    if not _require_state(controller, SessionState.ACTIVE):
        return 1
    router = ViewRouter(controller)
    try:
        router.navigate(view)
        screen = router.resolve()
        result = action(screen)
    finally:
        router.close()
    if screen.error:
        print(f"Error: {screen.error}", file=sys.stderr)
        return 1
    _print_json(result)
    return 0


def cmd_register(args: argparse.Namespace) -> int:
    with _session(args) as controller:
        if controller.state is not SessionState.UNAUTHENTICATED:
            controller.logout()
        print(controller.register(args.email, _password(args)))
    return 0


def cmd_login(args: argparse.Namespace) -> int:
    with _session(args) as controller:
        if controller.state is not SessionState.UNAUTHENTICATED:
            controller.logout()
        state = controller.login(args.email, _password(args))
        print(f"Logged in as {controller.user.email}.")
        if state in _NEXT_STEP:
            print(_NEXT_STEP[state])
    return 0


def cmd_logout(args: argparse.Namespace) -> int:
    with _session(args) as controller:
        controller.logout()
    print("Logged out.")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    with _session(args) as controller:
        user = controller.user
        _print_json(
            {
                "state": controller.state.value,
                "email": user.email if user else None,
                "hasProfile": bool(user and user.profile),
                "hasApiKey": bool(user and user.has_api_key),
                "symptomCount": len(controller.symptoms),
            }
        )
        if controller.state in _NEXT_STEP:
            print(_NEXT_STEP[controller.state])
    return 0


def cmd_profile(args: argparse.Namespace) -> int:
    try:
        profile = UserProfile(
            condition=args.condition,
            dietary_goal=args.goal,
            age=args.age,
            allergies=args.allergy or [],
            disliked_foods=args.disliked or [],
            notes=args.notes,
        )
    except PydanticValidationError as exc:
        print(f"Error: invalid profile: {exc.errors()[0]['msg']}", file=sys.stderr)
        return 1
    with _session(args) as controller:
        if not _require_state(controller, *SIGNED_IN_STATES):
            return 1
        _print_json(controller.save_profile(profile))
        if controller.state in _NEXT_STEP:
            print(_NEXT_STEP[controller.state])
    return 0


def cmd_api_key(args: argparse.Namespace) -> int:
    with _session(args) as controller:
        if not _require_state(controller, SessionState.API_KEY_REQUIRED, SessionState.ACTIVE):
            return 1
        print(controller.save_api_key(args.key))
    return 0


def cmd_symptom(args: argparse.Namespace) -> int:
    with _session(args) as controller:
        return _run_screen(
            controller,
            View.SYMPTOM_LOGGER,
            lambda screen: screen.log(args.symptom, severity=args.severity, foods=args.food, notes=args.notes),
        )


def cmd_symptoms(args: argparse.Namespace) -> int:
    with _session(args) as controller:
        if not _require_state(controller, *SIGNED_IN_STATES):
            return 1
        _print_json(controller.symptoms)
    return 0


def cmd_meal_plan(args: argparse.Namespace) -> int:
    with _session(args) as controller:
        return _run_screen(controller, View.MEAL_PLAN, lambda screen: screen.generate())


def cmd_check_food(args: argparse.Namespace) -> int:
    with _session(args) as controller:
        return _run_screen(controller, View.FOOD_CHECKER, lambda screen: screen.check(args.food, args.image))


def cmd_analyze(args: argparse.Namespace) -> int:
    with _session(args) as controller:
        return _run_screen(controller, View.HEALTH_REPORT, lambda screen: screen.analyze())


def cmd_recipe(args: argparse.Namespace) -> int:
    request = " ".join(args.request)
    with _session(args) as controller:
        return _run_screen(controller, View.RECIPE_LIBRARY, lambda screen: screen.suggest(request))


def cmd_serve(args: argparse.Namespace) -> int:
    from ..api import run

    run()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gastrohealth", description="GastroHealth AI command-line client")
    parser.add_argument("--base-url", default=settings.api_base_url, help="API base URL")
    parser.add_argument("--token-path", default=str(settings.token_path), help="Where the login token is kept")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("register", help="Create an account")
    p.add_argument("email")
    p.add_argument("--password", help="Prompted for when omitted")
    p.set_defaults(func=cmd_register)

    p = sub.add_parser("login", help="Log in and store the token")
    p.add_argument("email")
    p.add_argument("--password", help="Prompted for when omitted")
    p.set_defaults(func=cmd_login)

    p = sub.add_parser("logout", help="Forget the stored token")
    p.set_defaults(func=cmd_logout)

    p = sub.add_parser("status", help="Show session state")
    p.set_defaults(func=cmd_status)

    p = sub.add_parser("profile", help="Save the onboarding profile")
    p.add_argument("--condition", required=True, help="e.g. IBS, GERD, gastritis")
    p.add_argument("--goal", help="Dietary goal")
    p.add_argument("--age", type=int)
    p.add_argument("--allergy", action="append", help="Repeat for each allergy")
    p.add_argument("--disliked", action="append", help="Repeat for each disliked food")
    p.add_argument("--notes")
    p.set_defaults(func=cmd_profile)

    p = sub.add_parser("api-key", help="Store your Gemini API key")
    p.add_argument("key")
    p.set_defaults(func=cmd_api_key)

    p = sub.add_parser("symptom", help="Log a symptom")
    p.add_argument("symptom")
    p.add_argument("--severity", type=int, default=5, help="1-10 (default: 5)")
    p.add_argument("--food", action="append", help="Repeat for each food eaten beforehand")
    p.add_argument("--notes")
    p.set_defaults(func=cmd_symptom)

    p = sub.add_parser("symptoms", help="List logged symptoms")
    p.set_defaults(func=cmd_symptoms)

    p = sub.add_parser("meal-plan", help="Generate a meal plan")
    p.set_defaults(func=cmd_meal_plan)

    p = sub.add_parser("check-food", help="Check whether a food suits you")
    p.add_argument("food")
    p.add_argument("--image", help="Optional photo of the food")
    p.set_defaults(func=cmd_check_food)

    p = sub.add_parser("analyze", help="Analyze symptom triggers")
    p.set_defaults(func=cmd_analyze)

    p = sub.add_parser("recipe", help="Suggest a recipe")
    p.add_argument("request", nargs="+")
    p.set_defaults(func=cmd_recipe)

    p = sub.add_parser("serve", help="Run the API server")
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except ClientError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
