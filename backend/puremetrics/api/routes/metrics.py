from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from puremetrics.api.deps import get_manager
from puremetrics.core.exceptions import NotFoundError, ValidationError
from puremetrics.models import HealthMetric, MetricType
from puremetrics.models.metrics import METRIC_RANGES
from puremetrics.services.data_manager import DataManager

router = APIRouter()


class MetricCreate(BaseModel):
    type: MetricType
    value: float
    timestamp: Optional[datetime] = None


def metric_to_response(metric: HealthMetric) -> dict:
    return {
        **metric.model_dump(mode="json"),
        "unit": metric.type.unit,
        "display": metric.display_string,
    }


def _metrics_response(metrics: list[HealthMetric]) -> dict:
    return {"metrics": [metric_to_response(m) for m in metrics], "count": len(metrics)}


@router.post("", status_code=201)
async def add_metric(request: MetricCreate, manager: DataManager = Depends(get_manager)):
    if not manager.add_health_metric(request.type, request.value, request.timestamp):
        low, high = METRIC_RANGES[request.type]
        raise ValidationError("value", f"{request.type.display_name} must be between {low:g} and {high:g}")
    return metric_to_response(manager.health_metrics[0])


@router.get("")
async def list_metrics(
    type: Optional[MetricType] = Query(None),
    limit: Optional[int] = Query(None, ge=1),
    manager: DataManager = Depends(get_manager),
):
    if type is None:
        metrics = manager.health_metrics
        return _metrics_response(metrics[:limit] if limit else metrics)
    return _metrics_response(manager.get_health_metrics(type, limit))


@router.get("/by-date/{day}")
async def metrics_for_date(day: date, manager: DataManager = Depends(get_manager)):
    return _metrics_response(manager.health_metrics_for_date(day))


@router.get("/range")
async def metrics_between(
    start: datetime = Query(...),
    end: datetime = Query(...),
    manager: DataManager = Depends(get_manager),
):
    return _metrics_response(manager.health_metrics_between(start, end))


@router.get("/{metric_type}/latest")
async def latest_metric(metric_type: MetricType, manager: DataManager = Depends(get_manager)):
    metric = manager.latest_health_metric(metric_type)
    if metric is None:
        raise NotFoundError("Health metric", metric_type.value)
    return metric_to_response(metric)


@router.get("/{metric_type}/trend")
async def metric_trend(
    metric_type: MetricType,
    days: int = Query(7, ge=1, le=365),
    manager: DataManager = Depends(get_manager),
):
    return {"type": metric_type.value, "days": days, "trend": manager.trend(metric_type, days).value}


@router.get("/{metric_type}/average")
async def metric_average(
    metric_type: MetricType,
    days: int = Query(30, ge=1, le=365),
    manager: DataManager = Depends(get_manager),
):
    return {
        "type": metric_type.value,
        "days": days,
        "average": manager.average_value(metric_type, days),
        "unit": metric_type.unit,
    }


@router.delete("/{metric_id}")
async def delete_metric(metric_id: UUID, manager: DataManager = Depends(get_manager)):
    if not manager.remove_health_metric(metric_id):
        raise NotFoundError("Health metric", metric_id)
    return {"deleted": 1}
