"""ASGI application for the Home Management Hub."""
# mypy: ignore-errors

from __future__ import annotations

import logging
import re
from time import perf_counter
from typing import Any, Optional
from uuid import uuid4

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import Body, Depends, FastAPI, File, HTTPException, Query, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import ValidationError

from homehub import __version__, factory, metrics
from homehub.config import get_settings
from homehub.domain import MealCatalog, ShoppingList, TaskTracker, WeeklyPlanner
from homehub.errors import ImportFormatError, StorageError
from homehub.feedback import FeedbackMessage, FeedbackQueue
from homehub.logging_utils import configure_from_settings
from homehub.models import (
    HouseholdSettings,
    Meal,
    MealFilters,
    ShoppingItem,
    Task,
    TaskKind,
    Weekday,
    WeeklyPlan,
)
from homehub.notifications import NotificationCenter, NotificationMonitor
from homehub.server import deps, proxy
from homehub.store import DocumentStore, StorageInfo
from homehub.store.document import CLEAR_CONFIRM_PROMPT, CLEAR_PROMPT
from homehub.utils import FieldRule, validate_form

logger = logging.getLogger(__name__)

MAX_IMPORT_BYTES = 5 * 1024 * 1024  # 5 MiB

MEAL_FORM_RULES = {
    "title": FieldRule(label="Title", required=True, max_length=100),
    "type": FieldRule(label="Meal type", required=True),
}
SHOPPING_FORM_RULES = {"name": FieldRule(label="Item name", required=True, max_length=100)}
TASK_FORM_RULES = {
    "name": FieldRule(label="Task name", required=True, max_length=100),
    "dueDate": FieldRule(
        label="Due date",
        pattern=re.compile(r"^(\d{4}-\d{2}-\d{2})?$"),
        pattern_message="Due date must be a YYYY-MM-DD date",
    ),
}


def _json_safe(value: Any) -> Any:
    """Convert non-serializable values into JSON-safe representations."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.hex()
    if isinstance(value, (list, tuple)):
        return [_json_safe(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _json_safe(sub_value) for key, sub_value in value.items()}
    return repr(value)


def _normalize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Ensure validation error payloads can be serialized to JSON."""

    return [{key: _json_safe(value) for key, value in error.items()} for error in errors]


def _check_form(payload: dict[str, Any], rules: dict[str, FieldRule], *, partial: bool = False) -> None:
    checked_rules = {name: rule for name, rule in rules.items() if not partial or name in payload}
    errors = validate_form(payload, checked_rules)
    if errors:
        logger.warning("Rejected form payload errors=%s", errors)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)


def _parse_day(day: str) -> Weekday:
    try:
        return Weekday.parse(day)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


def _not_found(kind: str, record_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{kind} {record_id} not found")


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    configure_from_settings(settings)

    application = FastAPI(title="Home Management Hub", version=__version__)

    scheduler = AsyncIOScheduler()
    application.state.scheduler = scheduler

    @application.on_event("startup")
    async def start_scheduler() -> None:
        store = factory.build_document_store(settings)
        store.initialize()
        if settings.notifications_worker_enabled:
            center = factory.build_notification_center(store, settings, scheduler)
            monitor = NotificationMonitor(center, poll_interval=settings.notification_poll_interval)
            monitor.start(scheduler)
        scheduler.start()

    @application.on_event("shutdown")
    async def stop_scheduler() -> None:
        if scheduler.running:
            scheduler.shutdown(wait=False)

    application.include_router(proxy.router)
    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        access_logger = logging.getLogger("homehub.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details without leaking sensitive data."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                    duration_ms / 1000.0
                )
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(
                method=method,
                path=path,
                status=str(response.status_code),
            ).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
            return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        body_preview: str | None = None
        raw_body = await request.body()
        if raw_body:
            decoded = raw_body.decode("utf-8", errors="replace")
            if len(decoded) > 2048:
                decoded = decoded[:2048] + "...(truncated)"
            body_preview = decoded

        log_kwargs: dict[str, Any] = {}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            log_kwargs["extra"] = {"request_id": request_id}

        logger.warning(
            "Validation error on %s %s: %s | body=%s",
            request.method,
            request.url.path,
            exc.errors(),
            body_preview,
            **log_kwargs,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": _normalize_validation_errors(exc.errors())},
        )

    @application.exception_handler(ValidationError)
    async def record_validation_handler(request: Request, exc: ValidationError):
        logger.warning("Invalid record on %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": _normalize_validation_errors(exc.errors())},
        )

    @application.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        return JSONResponse(
            status_code=status.HTTP_507_INSUFFICIENT_STORAGE,
            content={"detail": str(exc)},
        )

    @application.exception_handler(ImportFormatError)
    async def import_format_handler(request: Request, exc: ImportFormatError):
        logger.warning("Rejected household data import: %s", exc)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @application.get(
        "/feedback",
        response_model=list[FeedbackMessage],
        summary="Drain queued user feedback messages",
    )
    def feedback_drain(
        queue: FeedbackQueue = Depends(deps.get_feedback_queue),
    ) -> list[FeedbackMessage]:
        return queue.drain()

    # Meals

    @application.get("/meals", response_model=list[Meal], summary="List catalog meals")
    def meals_list(catalog: MealCatalog = Depends(deps.get_meal_catalog)) -> list[Meal]:
        return catalog.get_meals()

    @application.get("/meals/search", response_model=list[Meal], summary="Filter catalog meals")
    def meals_search(
        meal_type: Optional[str] = Query(default=None, alias="type"),
        dietary: Optional[list[str]] = Query(default=None),
        ingredient: Optional[str] = Query(default=None),
        search: Optional[str] = Query(default=None, alias="q"),
        catalog: MealCatalog = Depends(deps.get_meal_catalog),
    ) -> list[Meal]:
        filters = MealFilters(
            type=meal_type,
            dietary=dietary or [],
            ingredient=ingredient,
            search=search,
        )
        return catalog.filter_meals(filters)

    @application.post(
        "/meals",
        response_model=Meal,
        status_code=status.HTTP_201_CREATED,
        summary="Add a meal to the catalog",
    )
    def meals_create(
        payload: dict[str, Any] = Body(...),
        auth: None = Depends(deps.require_api_token),
        catalog: MealCatalog = Depends(deps.get_meal_catalog),
    ) -> Meal:
        _check_form(payload, MEAL_FORM_RULES)
        return catalog.add_meal(payload)

    @application.get("/meals/{meal_id}", response_model=Meal, summary="Retrieve a meal")
    def meals_get(meal_id: str, catalog: MealCatalog = Depends(deps.get_meal_catalog)) -> Meal:
        meal = catalog.get_meal(meal_id)
        if meal is None:
            raise _not_found("Meal", meal_id)
        return meal

    @application.put("/meals/{meal_id}", response_model=Meal, summary="Update a meal")
    def meals_update(
        meal_id: str,
        payload: dict[str, Any] = Body(...),
        auth: None = Depends(deps.require_api_token),
        catalog: MealCatalog = Depends(deps.get_meal_catalog),
    ) -> Meal:
        _check_form(payload, MEAL_FORM_RULES, partial=True)
        meal = catalog.update_meal(meal_id, payload)
        if meal is None:
            raise _not_found("Meal", meal_id)
        return meal

    @application.delete(
        "/meals/{meal_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a meal",
    )
    def meals_delete(
        meal_id: str,
        auth: None = Depends(deps.require_api_token),
        catalog: MealCatalog = Depends(deps.get_meal_catalog),
    ) -> None:
        if not catalog.delete_meal(meal_id):
            raise _not_found("Meal", meal_id)

    @application.post("/meals/{meal_id}/favourite", summary="Toggle a meal's favourite flag")
    def meals_toggle_favourite(
        meal_id: str,
        auth: None = Depends(deps.require_api_token),
        catalog: MealCatalog = Depends(deps.get_meal_catalog),
    ) -> dict[str, bool]:
        if catalog.get_meal(meal_id) is None:
            raise _not_found("Meal", meal_id)
        return {"favourite": catalog.toggle_favourite(meal_id)}

    # Weekly planner

    @application.get("/planner", response_model=WeeklyPlan, summary="Return the weekly plan")
    def planner_week(planner: WeeklyPlanner = Depends(deps.get_weekly_planner)) -> WeeklyPlan:
        return planner.get_weekly_plan()

    @application.get("/planner/today", summary="Return today's planned meals")
    def planner_today(planner: WeeklyPlanner = Depends(deps.get_weekly_planner)) -> dict[str, Any]:
        day = planner.today()
        return {
            "day": day.value,
            "mealIds": planner.get_meals_for_day(day),
            "meals": [meal.to_document() for meal in planner.get_planned_meals(day)],
        }

    @application.get("/planner/{day}", summary="Return the meals planned for a day")
    def planner_day(
        day: str,
        planner: WeeklyPlanner = Depends(deps.get_weekly_planner),
    ) -> dict[str, Any]:
        weekday = _parse_day(day)
        return {
            "day": weekday.value,
            "mealIds": planner.get_meals_for_day(weekday),
            "meals": [meal.to_document() for meal in planner.get_planned_meals(weekday)],
        }

    @application.post("/planner/{day}/meals/{meal_id}", summary="Plan a meal on a day")
    def planner_add(
        day: str,
        meal_id: str,
        auth: None = Depends(deps.require_api_token),
        planner: WeeklyPlanner = Depends(deps.get_weekly_planner),
    ) -> dict[str, bool]:
        weekday = _parse_day(day)
        return {"added": planner.add_meal_to_day(weekday, meal_id)}

    @application.delete("/planner/{day}/meals/{meal_id}", summary="Remove a meal from a day")
    def planner_remove(
        day: str,
        meal_id: str,
        auth: None = Depends(deps.require_api_token),
        planner: WeeklyPlanner = Depends(deps.get_weekly_planner),
    ) -> dict[str, bool]:
        weekday = _parse_day(day)
        return {"removed": planner.remove_meal_from_day(weekday, meal_id)}

    @application.delete(
        "/planner/{day}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Clear one day of the plan",
    )
    def planner_clear_day(
        day: str,
        auth: None = Depends(deps.require_api_token),
        planner: WeeklyPlanner = Depends(deps.get_weekly_planner),
    ) -> None:
        planner.clear_day(_parse_day(day))

    @application.delete(
        "/planner",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Clear the whole week",
    )
    def planner_clear_week(
        auth: None = Depends(deps.require_api_token),
        planner: WeeklyPlanner = Depends(deps.get_weekly_planner),
    ) -> None:
        planner.clear_week()

    # Shopping list

    @application.get(
        "/shopping-list",
        response_model=list[ShoppingItem],
        summary="List shopping list items",
    )
    def shopping_list_list(
        shopping: ShoppingList = Depends(deps.get_shopping_list),
    ) -> list[ShoppingItem]:
        return shopping.get_shopping_list()

    @application.get("/shopping-list/total", summary="Total price of unchecked items")
    def shopping_list_total(
        shopping: ShoppingList = Depends(deps.get_shopping_list),
    ) -> dict[str, float]:
        return {"total": round(shopping.get_total_cost(), 2)}

    @application.post(
        "/shopping-list",
        response_model=ShoppingItem,
        status_code=status.HTTP_201_CREATED,
        summary="Add a shopping list item",
    )
    def shopping_list_create(
        payload: dict[str, Any] = Body(...),
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingList = Depends(deps.get_shopping_list),
    ) -> ShoppingItem:
        _check_form(payload, SHOPPING_FORM_RULES)
        return shopping.add_shopping_item(payload)

    @application.post("/shopping-list/clear-checked", summary="Remove checked items")
    def shopping_list_clear_checked(
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingList = Depends(deps.get_shopping_list),
    ) -> list[dict[str, Any]]:
        return [item.to_document() for item in shopping.clear_checked_items()]

    @application.post("/shopping-list/generate", summary="Add ingredients from the weekly plan")
    def shopping_list_generate(
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingList = Depends(deps.get_shopping_list),
    ) -> dict[str, int]:
        return {"added": shopping.generate_from_meal_plan()}

    @application.put(
        "/shopping-list/{item_id}",
        response_model=ShoppingItem,
        summary="Update a shopping list item",
    )
    def shopping_list_update(
        item_id: str,
        payload: dict[str, Any] = Body(...),
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingList = Depends(deps.get_shopping_list),
    ) -> ShoppingItem:
        _check_form(payload, SHOPPING_FORM_RULES, partial=True)
        item = shopping.update_item(item_id, payload)
        if item is None:
            raise _not_found("Shopping item", item_id)
        return item

    @application.post("/shopping-list/{item_id}/toggle", summary="Toggle an item's checked flag")
    def shopping_list_toggle(
        item_id: str,
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingList = Depends(deps.get_shopping_list),
    ) -> dict[str, bool]:
        if shopping.get_item(item_id) is None:
            raise _not_found("Shopping item", item_id)
        return {"checked": shopping.toggle_item_checked(item_id)}

    @application.delete(
        "/shopping-list/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Remove a shopping list item",
    )
    def shopping_list_delete(
        item_id: str,
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingList = Depends(deps.get_shopping_list),
    ) -> None:
        if not shopping.remove_item(item_id):
            raise _not_found("Shopping item", item_id)

    # Tasks

    @application.get("/tasks/{kind}", response_model=list[Task], summary="List tasks of a kind")
    def tasks_list(kind: TaskKind, tracker: TaskTracker = Depends(deps.get_task_tracker)) -> list[Task]:
        return tracker.get_tasks(kind)

    @application.get("/tasks/{kind}/due", response_model=list[Task], summary="List due tasks")
    def tasks_due(kind: TaskKind, tracker: TaskTracker = Depends(deps.get_task_tracker)) -> list[Task]:
        return tracker.get_due_tasks(kind)

    @application.post(
        "/tasks/{kind}",
        response_model=Task,
        status_code=status.HTTP_201_CREATED,
        summary="Add a task",
    )
    def tasks_create(
        kind: TaskKind,
        payload: dict[str, Any] = Body(...),
        auth: None = Depends(deps.require_api_token),
        tracker: TaskTracker = Depends(deps.get_task_tracker),
    ) -> Task:
        _check_form(payload, TASK_FORM_RULES)
        return tracker.add_task(payload, kind)

    @application.put("/tasks/{kind}/{task_id}", response_model=Task, summary="Update a task")
    def tasks_update(
        kind: TaskKind,
        task_id: str,
        payload: dict[str, Any] = Body(...),
        auth: None = Depends(deps.require_api_token),
        tracker: TaskTracker = Depends(deps.get_task_tracker),
    ) -> Task:
        _check_form(payload, TASK_FORM_RULES, partial=True)
        task = tracker.update_task(task_id, payload, kind)
        if task is None:
            raise _not_found("Task", task_id)
        return task

    @application.post(
        "/tasks/{kind}/{task_id}/toggle",
        response_model=Task,
        summary="Toggle task completion",
    )
    def tasks_toggle(
        kind: TaskKind,
        task_id: str,
        auth: None = Depends(deps.require_api_token),
        tracker: TaskTracker = Depends(deps.get_task_tracker),
    ) -> Task:
        task = tracker.toggle_task_complete(task_id, kind)
        if task is None:
            raise _not_found("Task", task_id)
        return task

    @application.delete(
        "/tasks/{kind}/{task_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a task",
    )
    def tasks_delete(
        kind: TaskKind,
        task_id: str,
        auth: None = Depends(deps.require_api_token),
        tracker: TaskTracker = Depends(deps.get_task_tracker),
    ) -> None:
        if not tracker.delete_task(task_id, kind):
            raise _not_found("Task", task_id)

    # Settings and data management

    @application.get("/settings", response_model=HouseholdSettings, summary="Return settings")
    def settings_get(
        center: NotificationCenter = Depends(deps.get_notification_center),
    ) -> HouseholdSettings:
        return center.settings()

    @application.put("/settings", response_model=HouseholdSettings, summary="Update settings")
    def settings_update(
        payload: dict[str, Any] = Body(...),
        auth: None = Depends(deps.require_api_token),
        center: NotificationCenter = Depends(deps.get_notification_center),
    ) -> HouseholdSettings:
        if not payload:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No fields provided for update",
            )
        return center.update_settings(**payload)

    @application.get("/data/export", summary="Download a backup of all household data")
    def data_export(
        auth: None = Depends(deps.require_api_token),
        store: DocumentStore = Depends(deps.get_document_store),
    ) -> Response:
        exported = store.export()
        return Response(
            content=exported.content,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
        )

    @application.post("/data/import", summary="Replace household data from a backup file")
    async def data_import(
        file: UploadFile = File(...),
        auth: None = Depends(deps.require_api_token),
        store: DocumentStore = Depends(deps.get_document_store),
    ) -> dict[str, Any]:
        content = await file.read()
        if len(content) > MAX_IMPORT_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Backup exceeds {MAX_IMPORT_BYTES // (1024 * 1024)} MiB limit.",
            )
        document = store.import_bytes(content)
        store.feedback.success("Data imported successfully!")
        logger.info("Imported backup with sections=%s", sorted(document))
        return {"imported": True, "itemCounts": store.storage_info().item_counts}

    @application.delete("/data", summary="Delete all household data")
    def data_clear(
        confirm: bool = Query(default=False),
        confirm_again: bool = Query(default=False),
        auth: None = Depends(deps.require_api_token),
        store: DocumentStore = Depends(deps.get_document_store),
    ) -> dict[str, bool]:
        answers = {CLEAR_PROMPT: confirm, CLEAR_CONFIRM_PROMPT: confirm_again}
        if not store.clear(lambda prompt: answers.get(prompt, False)):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Data was not cleared; both confirmations are required.",
            )
        return {"cleared": True}

    @application.get("/data/info", response_model=StorageInfo, summary="Report storage usage")
    def data_info(store: DocumentStore = Depends(deps.get_document_store)) -> StorageInfo:
        return store.storage_info()

    # Notifications

    @application.get("/notifications/status", summary="Notification platform status")
    def notifications_status(
        center: NotificationCenter = Depends(deps.get_notification_center),
    ) -> dict[str, Any]:
        return {
            "supported": center.is_supported(),
            "permission": center.permission_status(),
            "enabled": center.settings().notifications_enabled,
        }

    @application.post("/notifications/permission", summary="Request notification permission")
    def notifications_request_permission(
        auth: None = Depends(deps.require_api_token),
        center: NotificationCenter = Depends(deps.get_notification_center),
    ) -> dict[str, Any]:
        granted = center.request_permission()
        return {"granted": granted, "permission": center.permission_status()}

    @application.post(
        "/notifications/disable",
        response_model=HouseholdSettings,
        summary="Turn notifications off",
    )
    def notifications_disable(
        auth: None = Depends(deps.require_api_token),
        center: NotificationCenter = Depends(deps.get_notification_center),
    ) -> HouseholdSettings:
        center.disable_notifications()
        return center.settings()

    @application.post("/notifications/check", summary="Run every reminder check now")
    def notifications_check(
        auth: None = Depends(deps.require_api_token),
        monitor: NotificationMonitor = Depends(deps.get_notification_monitor),
    ) -> dict[str, int]:
        return {"shown": monitor.poll_once()}

    return application


app = create_app()

__all__ = ["app", "create_app"]
