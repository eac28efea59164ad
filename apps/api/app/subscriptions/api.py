from __future__ import annotations

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from app.api.errors import FieldValidationError, error_response
from app.core.config import get_settings
from app.core.database import get_db
from app.subscriptions.errors import InvalidPeriodError, NotFoundError, RepositoryError
from app.subscriptions.filters import SubscriptionFilter, TotalCostFilter
from app.subscriptions.month_year import parse_month_year
from app.subscriptions.repository import SqlAlchemySubscriptionRepository
from app.subscriptions.schemas import IDResponse, IntResponse, SubscriptionCreate, SubscriptionRead, SubscriptionUpdate
from app.subscriptions.service import SubscriptionService


logger = logging.getLogger("app.subscriptions")

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    return SubscriptionService(SqlAlchemySubscriptionRepository(db))


def _parse_uuid(raw: str | None, field: str, errors: dict[str, str]) -> uuid.UUID | None:
    if raw is None or not raw.strip():
        return None
    try:
        return uuid.UUID(raw.strip())
    except ValueError:
        errors[field] = f"invalid uuid '{raw}'"
        return None


def _parse_month(raw: str | None, field: str, errors: dict[str, str]) -> date | None:
    try:
        return parse_month_year(raw)
    except ValueError as exc:
        errors[field] = str(exc)
        return None


def build_subscription_filter(
    *,
    user_id: str | None,
    service_name: str | None,
    start_date: str | None,
    end_date: str | None,
    page: int,
    page_size: int,
) -> SubscriptionFilter:
    errors: dict[str, str] = {}
    parsed_user_id = _parse_uuid(user_id, "user_id", errors)
    parsed_start = _parse_month(start_date, "start_date", errors)
    parsed_end = _parse_month(end_date, "end_date", errors)
    if page < 1:
        errors["page"] = "must be greater than or equal to 1"
    if page_size < 1:
        errors["page_size"] = "must be greater than or equal to 1"
    if errors:
        raise FieldValidationError(errors)

    return SubscriptionFilter(
        user_id=parsed_user_id,
        service_name=service_name,
        start_date=parsed_start,
        end_date=parsed_end,
        page=page,
        page_size=page_size,
    )


def build_total_cost_filter(
    *,
    user_id: str | None,
    service_name: str | None,
    period_start: str | None,
    period_end: str | None,
) -> TotalCostFilter:
    errors: dict[str, str] = {}
    parsed_user_id = _parse_uuid(user_id, "user_id", errors)
    parsed_start = _parse_month(period_start, "period_start", errors)
    parsed_end = _parse_month(period_end, "period_end", errors)

    required = {
        "user_id": parsed_user_id,
        "service_name": service_name or None,
        "period_start": parsed_start,
        "period_end": parsed_end,
    }
    for field, value in required.items():
        if value is None:
            errors.setdefault(field, "field required")
    if errors or parsed_user_id is None or not service_name or parsed_start is None or parsed_end is None:
        raise FieldValidationError(errors)

    return TotalCostFilter(
        user_id=parsed_user_id,
        service_name=service_name,
        period_start=parsed_start,
        period_end=parsed_end,
    )


def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return error_response(
        request,
        status_code=status.HTTP_404_NOT_FOUND,
        code="subscription_not_found",
        message=str(exc),
        details={"id": str(exc.subscription_id)},
    )


def _invalid_period(request: Request, exc: InvalidPeriodError) -> JSONResponse:
    return error_response(
        request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="invalid_period",
        message=str(exc),
        details={"end_date": "must not precede start_date"},
    )


def _internal_error(request: Request, operation: str) -> JSONResponse:
    logger.exception("subscription.request_failed", extra={"operation": operation})
    return error_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        message="internal server error",
    )


@router.post("", response_model=IDResponse, status_code=status.HTTP_201_CREATED)
def create_subscription(
    request: Request,
    payload: SubscriptionCreate = Body(...),
    service: SubscriptionService = Depends(get_subscription_service),
) -> IDResponse | JSONResponse:
    try:
        return IDResponse(id=service.create_subscription(payload.to_command()))
    except InvalidPeriodError as exc:
        return _invalid_period(request, exc)
    except RepositoryError:
        return _internal_error(request, "create")


@router.get("", response_model=list[SubscriptionRead])
def list_subscriptions(
    request: Request,
    user_id: str | None = Query(default=None),
    service_name: str | None = Query(default=None),
    start_date: str | None = Query(default=None, description="MM-YYYY; subscriptions starting on or after"),
    end_date: str | None = Query(default=None, description="MM-YYYY; subscriptions ending on or before, or open-ended"),
    page: int = Query(default=1),
    page_size: int | None = Query(default=None),
    service: SubscriptionService = Depends(get_subscription_service),
) -> list[SubscriptionRead] | JSONResponse:
    filters = build_subscription_filter(
        user_id=user_id,
        service_name=service_name,
        start_date=start_date,
        end_date=end_date,
        page=page,
        page_size=page_size if page_size is not None else get_settings().default_page_size,
    )
    try:
        return [SubscriptionRead.from_entity(item) for item in service.list_subscriptions(filters)]
    except RepositoryError:
        return _internal_error(request, "list")


@router.get("/total", response_model=IntResponse)
def calculate_total_cost(
    request: Request,
    user_id: str | None = Query(default=None),
    service_name: str | None = Query(default=None),
    period_start: str | None = Query(default=None, description="MM-YYYY, inclusive"),
    period_end: str | None = Query(default=None, description="MM-YYYY, inclusive"),
    service: SubscriptionService = Depends(get_subscription_service),
) -> IntResponse | JSONResponse:
    filters = build_total_cost_filter(
        user_id=user_id,
        service_name=service_name,
        period_start=period_start,
        period_end=period_end,
    )
    try:
        return IntResponse(value=service.calculate_total_cost(filters))
    except RepositoryError:
        return _internal_error(request, "total_cost")


@router.get("/{subscription_id}", response_model=SubscriptionRead)
def get_subscription(
    request: Request,
    subscription_id: uuid.UUID,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionRead | JSONResponse:
    try:
        return SubscriptionRead.from_entity(service.get_subscription(subscription_id))
    except NotFoundError as exc:
        return _not_found(request, exc)
    except RepositoryError:
        return _internal_error(request, "get")


@router.put("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def update_subscription(
    request: Request,
    subscription_id: uuid.UUID,
    payload: SubscriptionUpdate = Body(...),
    service: SubscriptionService = Depends(get_subscription_service),
) -> Response:
    try:
        service.update_subscription(subscription_id, payload.to_command())
    except NotFoundError as exc:
        return _not_found(request, exc)
    except InvalidPeriodError as exc:
        return _invalid_period(request, exc)
    except RepositoryError:
        return _internal_error(request, "update")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_subscription(
    request: Request,
    subscription_id: uuid.UUID,
    service: SubscriptionService = Depends(get_subscription_service),
) -> Response:
    try:
        service.delete_subscription(subscription_id)
    except RepositoryError:
        return _internal_error(request, "delete")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
