"""MacroPlan Server - Entry point.

Serves the planner state and derived numbers as JSON over HTTP for a local
front end. Uses Starlette routes run by uvicorn.
"""

import logging
import math
import os

import uvicorn
from pydantic import BaseModel, ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .core.constants import MACRO_PRESETS
from .core.goals import UnknownPresetError
from .core.models import FoodItem, Meal
from .shell.planner import Planner, model_updates
from .shell.storage import StorageConfig, create_store


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _dump(value: BaseModel | list[BaseModel]) -> object:
    if isinstance(value, list):
        return [item.model_dump() for item in value]
    return value.model_dump()


def _error(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _planner(request: Request) -> Planner:
    return request.app.state.planner


# ==================== Route Handlers ====================


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "healthy", "service": "macroplan"})


async def list_presets(request: Request) -> JSONResponse:
    return JSONResponse([_dump(p) for p in MACRO_PRESETS.values()])


async def get_goals(request: Request) -> JSONResponse:
    return JSONResponse(_dump(_planner(request).goal_breakdown()))


async def update_goals(request: Request) -> JSONResponse:
    """Update any of daily_calories, preset, custom_carbs, custom_protein."""
    planner = _planner(request)
    body = await _json_body(request)

    try:
        numbers = {}
        for field in ("daily_calories", "custom_carbs", "custom_protein"):
            if field in body:
                value = float(body[field])
                if not math.isfinite(value):
                    raise ValueError(f"{field} must be finite")
                numbers[field] = value
    except (TypeError, ValueError):
        return _error("Goal values must be finite numbers")

    try:
        if "preset" in body:
            planner.select_preset(str(body["preset"]))
    except UnknownPresetError as e:
        logger.warning("Rejected preset: %s", str(e))
        return _error(str(e))

    if "daily_calories" in numbers:
        planner.set_daily_calories(numbers["daily_calories"])
    if "custom_carbs" in numbers:
        planner.set_custom_carbs(numbers["custom_carbs"])
    if "custom_protein" in numbers:
        planner.set_custom_protein(numbers["custom_protein"])

    return JSONResponse(_dump(planner.goal_breakdown()))


async def adjust_custom(request: Request) -> JSONResponse:
    """Apply a +1/-1 control to custom carbs or protein."""
    planner = _planner(request)
    macro = request.path_params["macro"]
    action = request.path_params["action"]

    steps = {"increment": 1, "decrement": -1}
    if action not in steps:
        return _error(f"Unknown action: {action}", status_code=404)

    try:
        planner.adjust_custom(macro, steps[action])
    except ValueError as e:
        return _error(str(e))

    return JSONResponse(_dump(planner.goal_breakdown()))


# ==================== Entry Routes ====================


def _entry_routes(prefix: str, model: type[BaseModel], kind: str) -> list[Route]:
    """Build list/create/update/delete/summary routes for one entry list."""

    def ops(planner: Planner):
        if kind == "meal":
            return (planner.list_meals, planner.update_meal, planner.delete_meal, planner.meal_summary)
        return (planner.list_foods, planner.update_food, planner.delete_food, planner.food_summary)

    async def list_entries(request: Request) -> JSONResponse:
        list_fn, _, _, _ = ops(_planner(request))
        return JSONResponse(_dump(list_fn()))

    async def create_entry(request: Request) -> JSONResponse:
        planner = _planner(request)
        body = await _json_body(request)
        body.pop("id", None)
        try:
            if kind == "meal":
                updates = model_updates(Meal, body)
                entry = planner.add_meal(**updates)
            else:
                entry = planner.add_food(FoodItem(**body))
        except ValidationError as e:
            logger.warning("Rejected %s: %s", kind, str(e))
            return _error(f"Invalid {kind}")
        return JSONResponse(_dump(entry), status_code=201)

    async def update_entry(request: Request) -> JSONResponse:
        _, update_fn, _, _ = ops(_planner(request))
        body = await _json_body(request)
        try:
            updates = model_updates(model, body)
        except ValidationError as e:
            logger.warning("Rejected %s update: %s", kind, str(e))
            return _error(f"Invalid {kind}")

        entry = update_fn(request.path_params["entry_id"], updates)
        if entry is None:
            return _error(f"{kind.capitalize()} not found", status_code=404)
        return JSONResponse(_dump(entry))

    async def delete_entry(request: Request) -> JSONResponse:
        _, _, delete_fn, _ = ops(_planner(request))
        if not delete_fn(request.path_params["entry_id"]):
            return _error(f"{kind.capitalize()} not found", status_code=404)
        return JSONResponse({"deleted": request.path_params["entry_id"]})

    async def entry_summary(request: Request) -> JSONResponse:
        _, _, _, summary_fn = ops(_planner(request))
        return JSONResponse(_dump(summary_fn()))

    return [
        Route(prefix, list_entries, methods=["GET"]),
        Route(prefix, create_entry, methods=["POST"]),
        Route(f"{prefix}/summary", entry_summary, methods=["GET"]),
        Route(f"{prefix}/{{entry_id}}", update_entry, methods=["PATCH"]),
        Route(f"{prefix}/{{entry_id}}", delete_entry, methods=["DELETE"]),
    ]


# ==================== UI Flags ====================


async def get_ui_flags(request: Request) -> JSONResponse:
    return JSONResponse(_planner(request).ui_flags())


async def set_ui_flag(request: Request) -> JSONResponse:
    body = await _json_body(request)
    value = body.get("value")
    if not isinstance(value, bool):
        return _error("Flag value must be true or false")

    try:
        flags = _planner(request).set_ui_flag(request.path_params["flag"], value)
    except KeyError:
        return _error("Unknown flag", status_code=404)
    return JSONResponse(flags)


# ==================== Create ASGI App ====================


def storage_config_from_env() -> StorageConfig:
    return StorageConfig(path=os.environ.get("MACROPLAN_STORAGE_PATH", "macroplan_state.json"))


def create_app(planner: Planner | None = None) -> Starlette:
    """Create the Starlette application.

    Args:
        planner: Planner to serve (built from environment config if omitted)
    """
    if planner is None:
        planner = Planner(create_store(storage_config_from_env()))

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route("/presets", list_presets, methods=["GET"]),
        Route("/goals", get_goals, methods=["GET"]),
        Route("/goals", update_goals, methods=["PUT"]),
        Route("/goals/custom/{macro}/{action}", adjust_custom, methods=["POST"]),
        *_entry_routes("/meals", Meal, "meal"),
        *_entry_routes("/foods", FoodItem, "food"),
        Route("/ui", get_ui_flags, methods=["GET"]),
        Route("/ui/{flag}", set_ui_flag, methods=["PUT"]),
    ]

    app = Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["http://localhost:5173"],
                allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
                allow_headers=["*"],
            ),
        ],
    )
    app.state.planner = planner

    return app


def main() -> None:
    """Run the server."""
    port = int(os.environ.get("PORT", 8080))
    host = os.environ.get("HOST", "0.0.0.0")

    logger.info("Starting MacroPlan server on %s:%d", host, port)

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
