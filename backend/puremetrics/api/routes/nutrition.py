from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from puremetrics.api.deps import get_manager
from puremetrics.core.exceptions import NotFoundError, ValidationError
from puremetrics.models import CustomNutritionTemplate, NutritionEntry, NutritionGoals
from puremetrics.models.nutrition import NUTRIENT_GOALS
from puremetrics.services.data_manager import DataManager

router = APIRouter()


class TemplateApply(BaseModel):
    at: Optional[datetime] = None


def entry_to_response(entry: NutritionEntry) -> dict:
    return {
        **entry.model_dump(mode="json"),
        "protein_percentage": entry.protein_percentage,
        "carb_percentage": entry.carb_percentage,
        "fat_percentage": entry.fat_percentage,
    }


def _invalid_entry() -> ValidationError:
    return ValidationError("entry", "nutrient values must be finite and non-negative")


# =========================================================================
# Entries
# =========================================================================


@router.get("/entries")
async def list_entries(
    day: Optional[date] = Query(None),
    manager: DataManager = Depends(get_manager),
):
    entries = manager.nutrition_entries_for_date(day) if day else manager.nutrition_entries
    return {"entries": [entry_to_response(e) for e in entries], "count": len(entries)}


@router.post("/entries", status_code=201)
async def create_entry(entry: NutritionEntry, manager: DataManager = Depends(get_manager)):
    if not manager.add_nutrition_entry(entry):
        raise _invalid_entry()
    return entry_to_response(entry)


@router.put("/entries/{entry_id}")
async def update_entry(
    entry_id: UUID,
    entry: NutritionEntry,
    manager: DataManager = Depends(get_manager),
):
    if manager.get_record("nutrition_entries", entry_id) is None:
        raise NotFoundError("Nutrition entry", entry_id)
    entry = entry.model_copy(update={"id": entry_id})
    if not manager.update_nutrition_entry(entry):
        raise _invalid_entry()
    return entry_to_response(entry)


@router.delete("/entries/{entry_id}")
async def delete_entry(entry_id: UUID, manager: DataManager = Depends(get_manager)):
    if not manager.delete_nutrition_entry(entry_id):
        raise NotFoundError("Nutrition entry", entry_id)
    return {"deleted": 1}


# =========================================================================
# Goals and daily summary
# =========================================================================


@router.get("/goals")
async def get_goals(manager: DataManager = Depends(get_manager)):
    return manager.nutrition_goals.model_dump()


@router.put("/goals")
async def update_goals(goals: NutritionGoals, manager: DataManager = Depends(get_manager)):
    if not manager.update_nutrition_goals(goals):
        raise ValidationError("goals", "daily goals must be finite and non-negative")
    return manager.nutrition_goals.model_dump()


@router.get("/summary")
async def daily_summary(
    day: Optional[date] = Query(None),
    manager: DataManager = Depends(get_manager),
):
    summary = manager.nutrition_summary(day)
    return {
        **summary.model_dump(mode="json"),
        "progress": {field: summary.progress(field) for field in NUTRIENT_GOALS},
    }


# =========================================================================
# Templates
# =========================================================================


@router.get("/templates")
async def list_templates(manager: DataManager = Depends(get_manager)):
    templates = manager.nutrition_templates
    return {"templates": [t.model_dump(mode="json") for t in templates], "count": len(templates)}


@router.post("/templates", status_code=201)
async def save_template(template: CustomNutritionTemplate, manager: DataManager = Depends(get_manager)):
    if not manager.save_nutrition_template(template):
        raise ValidationError("template", "a name is required and nutrient values must be non-negative")
    return template.model_dump(mode="json")


@router.delete("/templates/{template_id}")
async def delete_template(template_id: UUID, manager: DataManager = Depends(get_manager)):
    if not manager.delete_nutrition_template(template_id):
        raise NotFoundError("Nutrition template", template_id)
    return {"deleted": 1}


@router.post("/templates/{template_id}/apply", status_code=201)
async def apply_template(
    template_id: UUID,
    request: Optional[TemplateApply] = None,
    manager: DataManager = Depends(get_manager),
):
    """Log a nutrition entry from the template."""
    if manager.get_record("nutrition_templates", template_id) is None:
        raise NotFoundError("Nutrition template", template_id)
    entry = manager.apply_nutrition_template(template_id, request.at if request else None)
    if entry is None:
        raise _invalid_entry()
    return entry_to_response(entry)
