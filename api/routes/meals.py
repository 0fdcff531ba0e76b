"""Meal menu routes"""

from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db, is_admin, require_admin
from api.responses import success_response
from domain.enums import MealType
from services import MealService

router = APIRouter(prefix="/meals", tags=["Meals"])
logger = logging.getLogger("restaurant.api.meals")


def meal_form(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    meal_type: Optional[str] = Form(None, alias="type"),
    category_id: Optional[str] = Form(None),
    meal_status: Optional[str] = Form(None, alias="status"),
    size: Optional[str] = Form(None),
    cost: Optional[str] = Form(None),
    number_of_pieces: Optional[str] = Form(None),
) -> Dict[str, Any]:
    """Collect the multipart meal fields that were actually sent"""
    fields = {
        "name": name,
        "description": description,
        "type": meal_type,
        "category_id": category_id,
        "status": meal_status,
        "size": size,
        "cost": cost,
        "number_of_pieces": number_of_pieces,
    }
    return {k: v for k, v in fields.items() if v is not None}


# ----------------------------------------------------------------------------
# Reads (visibility depends on the caller)
# ----------------------------------------------------------------------------


@router.get("")
def list_meals(
    db: Session = Depends(get_db), caller_is_admin: bool = Depends(is_admin)
):
    """Get all meals; inactive meals are only listed for admins"""
    meals = MealService.list_meals(db, caller_is_admin)
    return success_response(data=meals)


@router.get("/filter")
def filter_meals(
    name: Optional[str] = Query(None, description="Case-insensitive substring"),
    cost: Optional[Decimal] = Query(None),
    size: Optional[int] = Query(None),
    number_of_pieces: Optional[int] = Query(None),
    category_id: Optional[int] = Query(None),
    meal_status: Optional[bool] = Query(None, alias="status"),
    meal_type: Optional[MealType] = Query(None, alias="type"),
    db: Session = Depends(get_db),
    caller_is_admin: bool = Depends(is_admin),
):
    """
    Search meals by any combination of filters.

    Examples:
    - GET /meals/filter?name=chick
    - GET /meals/filter?size=2&cost=9.5
    - GET /meals/filter?category_id=3&type=vegetarian
    """
    filters = {
        "name": name,
        "cost": cost,
        "size": size,
        "number_of_pieces": number_of_pieces,
        "category_id": category_id,
        "status": meal_status,
        "type": meal_type,
    }
    results = MealService.filter_meals(db, filters, caller_is_admin)
    return success_response(data=results)


@router.get("/category/{category_id}")
def filter_by_category(
    category_id: int,
    page: int = Query(1),
    db: Session = Depends(get_db),
    caller_is_admin: bool = Depends(is_admin),
):
    """Meals of one category, 12 per page"""
    meals, pagination = MealService.filter_by_category(db, category_id, page, caller_is_admin)
    return success_response(data=meals, pagination=pagination)


@router.get("/type/{meal_type}")
def filter_by_type(
    meal_type: str,
    page: int = Query(1),
    db: Session = Depends(get_db),
    caller_is_admin: bool = Depends(is_admin),
):
    """Meals of one type (vegetarian or non-vegetarian), 12 per page"""
    meals, pagination = MealService.filter_by_type(db, meal_type, page, caller_is_admin)
    return success_response(data=meals, pagination=pagination)


@router.get("/status/{meal_status}")
def filter_by_status(
    meal_status: str,
    page: int = Query(1),
    db: Session = Depends(get_db),
    caller_is_admin: bool = Depends(is_admin),
):
    """Meals by status (active or inactive), 12 per page"""
    meals, pagination = MealService.filter_by_status(db, meal_status, page, caller_is_admin)
    return success_response(data=meals, pagination=pagination)


@router.get("/{meal_id}")
def get_meal(
    meal_id: int,
    db: Session = Depends(get_db),
    caller_is_admin: bool = Depends(is_admin),
):
    """Get a meal by ID with its cheapest size/cost variant"""
    meal = MealService.get_meal(db, meal_id, caller_is_admin)
    return success_response(data=meal)


@router.get("/{meal_id}/size-costs")
def list_size_costs(meal_id: int, db: Session = Depends(get_db)):
    """Get every size/cost variant of a meal"""
    size_costs = MealService.list_size_costs(db, meal_id)
    return success_response(data=size_costs)


# ----------------------------------------------------------------------------
# Writes (admin only)
# ----------------------------------------------------------------------------


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def add_meal(
    fields: Dict[str, Any] = Depends(meal_form),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    """
    Add a meal (multipart form) with its first size/cost variant.

    Raises:
        400: validation failed (field -> messages map)
        500: the insert transaction failed
    """
    meal = MealService.create_meal(db, fields, image)
    return success_response(data=meal, message="The meal has been added successfully")


@router.put("/{meal_id}", dependencies=[Depends(require_admin)])
def update_meal(
    meal_id: int,
    fields: Dict[str, Any] = Depends(meal_form),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    """
    Update a meal (multipart form). Omitted fields keep their values.

    Sending size with cost and/or number_of_pieces updates the variant of
    that size, or adds it when the meal has no such size yet.
    """
    meal = MealService.update_meal(db, meal_id, fields, image)
    return success_response(data=meal, message="The meal has been updated successfully")


@router.put("/{meal_id}/size-costs", dependencies=[Depends(require_admin)])
def update_meal_size_cost(
    meal_id: int,
    payload: Dict[str, Any] = Body(..., examples=[{"id": 3, "size": 2, "cost": 9.5}]),
    db: Session = Depends(get_db),
):
    """
    Add a size/cost variant, or update the one identified by ``id``.

    The body (id?, size, cost, number_of_pieces?) is validated after the
    meal lookup, so an unknown meal is 404 whatever the body holds.

    Raises:
        404: meal or variant not found
        422: the size is already used by another variant of the meal
    """
    entry = MealService.update_size_cost(db, meal_id, payload)
    return success_response(data=entry, message="The meal has been updated successfully")


@router.delete("/{meal_id}", dependencies=[Depends(require_admin)])
def delete_meal(meal_id: int, db: Session = Depends(get_db)):
    """Delete a meal, its image and all its size/cost variants"""
    MealService.delete_meal(db, meal_id)
    return success_response(message="Meal deleted successfully")
