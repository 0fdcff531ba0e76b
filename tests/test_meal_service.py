"""
Tests for MealService with real database operations.

Covers:
- Reads with the visibility rule (non-admins never see inactive meals)
- create_meal validation, image storage and transaction rollback
- update_meal sparse patches and size/cost upserts
- update_size_cost conflict handling
- delete_meal cascade
- Paginated filters and the dynamic search
"""

from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    InternalServiceError,
    NotFoundError,
    ServiceValidationError,
    UnprocessableEntityError,
)
from domain.models import Meal, MealSizeCost
from repositories import MealSizeCostRepository
from services import MealService
from services.meal_service import PAGE_OVERFLOW
from test_fixtures import db_session, make_category, make_meal, make_upload, meal_form


def create_via_service(db: Session, category, **overrides):
    data = meal_form(category_id=str(category.id), **overrides)
    return MealService.create_meal(db, data, make_upload())


# =============================================================================
# READS
# =============================================================================


def test_list_meals_hides_inactive_from_non_admin(db_session: Session):
    category = make_category(db_session)
    make_meal(db_session, category, name="Chicken Curry")
    make_meal(db_session, category, name="Beef Stew", status=False)

    public = MealService.list_meals(db_session, caller_is_admin=False)
    admin = MealService.list_meals(db_session, caller_is_admin=True)

    assert [m.name for m in public] == ["Chicken Curry"]
    assert {m.name for m in admin} == {"Chicken Curry", "Beef Stew"}


def test_summary_uses_cheapest_variant(db_session: Session):
    """
    Verifies:
    - cost/size/number_of_pieces come from the minimum-cost variant
    - category_name is resolved
    """
    category = make_category(db_session, name="Starters")
    meal = make_meal(
        db_session,
        category,
        size_costs=[(3, "15.00", 8), (1, "6.50", 4), (2, "9.00", None)],
    )

    summary = MealService.get_meal(db_session, meal.id, caller_is_admin=False)

    assert summary.cost == Decimal("6.50")
    assert summary.size == 1
    assert summary.number_of_pieces == 4
    assert summary.category_name == "Starters"


def test_summary_cost_tie_goes_to_lowest_id(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, size_costs=[(2, "7.00", None), (1, "7.00", None)])

    summary = MealService.get_meal(db_session, meal.id, caller_is_admin=True)

    assert summary.size == 2


def test_summary_without_variants_has_null_cost(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, size_costs=[])

    summary = MealService.get_meal(db_session, meal.id, caller_is_admin=True)

    assert summary.cost is None
    assert summary.size is None


def test_get_inactive_meal_as_non_admin_is_not_found(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, status=False)

    with pytest.raises(NotFoundError):
        MealService.get_meal(db_session, meal.id, caller_is_admin=False)

    assert MealService.get_meal(db_session, meal.id, caller_is_admin=True).status is False


def test_get_missing_meal(db_session: Session):
    with pytest.raises(NotFoundError, match="Meal not found"):
        MealService.get_meal(db_session, 404, caller_is_admin=True)


def test_list_size_costs_is_sparse(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, size_costs=[(1, "5.00", None), (2, "8.00", 6)])

    entries = MealService.list_size_costs(db_session, meal.id)

    assert entries[0] == {
        "id": entries[0]["id"],
        "meal_id": meal.id,
        "cost": Decimal("5.00"),
        "size": 1,
    }
    assert "number_of_pieces" not in entries[0]
    assert entries[1]["number_of_pieces"] == 6


def test_list_size_costs_missing_meal(db_session: Session):
    with pytest.raises(NotFoundError):
        MealService.list_size_costs(db_session, 999)


# =============================================================================
# CREATE
# =============================================================================


def test_create_meal_round_trip(db_session: Session, media_root):
    """
    Verifies:
    - Meal and its first variant are stored together
    - number_of_pieces is omitted from the variant when not supplied
    - The image is written under meals/ with a generated name
    """
    category = make_category(db_session)

    summary = create_via_service(db_session, category)

    assert summary.name == "Garden Salad"
    assert summary.type == "vegetarian"
    assert summary.status is True
    assert summary.size == 2
    assert summary.cost == Decimal("9.5")

    entries = MealService.list_size_costs(db_session, summary.id)
    assert len(entries) == 1
    assert entries[0]["size"] == 2
    assert entries[0]["cost"] == Decimal("9.5")
    assert "number_of_pieces" not in entries[0]

    assert summary.image.startswith("meals/")
    assert summary.image.endswith(".png")
    assert (media_root / summary.image).is_file()


def test_create_meal_with_fifty_spaced_letters(db_session: Session):
    """A name at the letter limit, padded with spaces, is stored intact."""
    category = make_category(db_session)
    name = " ".join(["ab"] * 25)

    summary = create_via_service(db_session, category, name=name)

    assert db_session.get(Meal, summary.id).name == name


def test_create_meal_collects_all_field_errors(db_session: Session):
    category = make_category(db_session)

    with pytest.raises(ServiceValidationError) as exc_info:
        MealService.create_meal(
            db_session,
            meal_form(category_id=str(category.id), name="Ab", size="9"),
            None,
        )

    details = exc_info.value.details
    assert set(details) == {"name", "size", "image"}
    assert details["image"] == ["The image field is required."]


def test_create_meal_duplicate_name(db_session: Session):
    category = make_category(db_session)
    make_meal(db_session, category, name="Garden Salad")

    with pytest.raises(ServiceValidationError) as exc_info:
        create_via_service(db_session, category)

    assert exc_info.value.details == {"name": ["The name has already been taken."]}


def test_create_meal_unknown_category(db_session: Session):
    with pytest.raises(ServiceValidationError) as exc_info:
        MealService.create_meal(db_session, meal_form(category_id="77"), make_upload())

    assert exc_info.value.details == {
        "category_id": ["The selected category id is invalid."]
    }


def test_create_meal_rolls_back_when_variant_insert_fails(
    db_session: Session, monkeypatch
):
    category = make_category(db_session)

    def broken_create_size_cost(self, **kwargs):
        raise RuntimeError("variant insert failed")

    monkeypatch.setattr(
        MealSizeCostRepository, "create_size_cost", broken_create_size_cost
    )

    with pytest.raises(InternalServiceError, match="variant insert failed"):
        create_via_service(db_session, category)

    assert db_session.query(Meal).count() == 0
    assert db_session.query(MealSizeCost).count() == 0


# =============================================================================
# UPDATE
# =============================================================================


def test_update_meal_changes_only_supplied_fields(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, name="Chicken Curry")
    description = meal.description

    summary = MealService.update_meal(db_session, meal.id, {"name": "Chicken Korma"})

    assert summary.name == "Chicken Korma"
    assert summary.description == description
    assert summary.type == "non-vegetarian"


def test_update_meal_keeps_its_own_name(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, name="Chicken Curry")

    summary = MealService.update_meal(
        db_session, meal.id, {"name": "Chicken Curry", "status": "false"}
    )

    assert summary.status is False


def test_update_meal_name_taken_by_other_meal(db_session: Session):
    category = make_category(db_session)
    make_meal(db_session, category, name="Beef Stew")
    meal = make_meal(db_session, category, name="Chicken Curry")

    with pytest.raises(ServiceValidationError) as exc_info:
        MealService.update_meal(db_session, meal.id, {"name": "Beef Stew"})

    assert "name" in exc_info.value.details


def test_update_meal_updates_existing_variant(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, size_costs=[(1, "8.00", 4), (2, "12.00", None)])

    MealService.update_meal(db_session, meal.id, {"size": "1", "cost": "7.25"})

    entries = {e["size"]: e for e in MealService.list_size_costs(db_session, meal.id)}
    assert entries[1]["cost"] == Decimal("7.25")
    assert entries[1]["number_of_pieces"] == 4
    assert entries[2]["cost"] == Decimal("12.00")


def test_update_meal_adds_new_variant(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, size_costs=[(1, "8.00", None)])

    MealService.update_meal(
        db_session, meal.id, {"size": "3", "cost": "14", "number_of_pieces": "10"}
    )

    entries = MealService.list_size_costs(db_session, meal.id)
    assert [e["size"] for e in entries] == [1, 3]
    assert entries[1]["number_of_pieces"] == 10


def test_update_meal_variant_fields_need_size(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category)

    with pytest.raises(ServiceValidationError) as exc_info:
        MealService.update_meal(db_session, meal.id, {"cost": "10"})

    assert "size" in exc_info.value.details


def test_update_meal_new_size_needs_cost(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, size_costs=[(1, "8.00", None)])

    with pytest.raises(ServiceValidationError) as exc_info:
        MealService.update_meal(db_session, meal.id, {"size": "4", "number_of_pieces": "2"})

    assert "cost" in exc_info.value.details


def test_update_meal_replaces_image(db_session: Session, media_root):
    category = make_category(db_session)
    created = create_via_service(db_session, category)
    old_image = media_root / created.image

    updated = MealService.update_meal(
        db_session,
        created.id,
        {},
        make_upload(filename="new.jpg", content_type="image/jpeg"),
    )

    assert not old_image.exists()
    assert updated.image.endswith(".jpg")
    assert (media_root / updated.image).is_file()


def test_update_missing_meal(db_session: Session):
    with pytest.raises(NotFoundError):
        MealService.update_meal(db_session, 999, {"name": "Pad Thai"})


# =============================================================================
# SIZE/COST UPSERT
# =============================================================================


def test_update_size_cost_creates_variant(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, size_costs=[(1, "8.00", None)])

    entry = MealService.update_size_cost(db_session, meal.id, {"size": 2, "cost": "11"})

    assert entry["meal_id"] == meal.id
    assert entry["size"] == 2
    assert entry["cost"] == Decimal("11")


def test_update_size_cost_existing_size_without_id(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, size_costs=[(1, "8.00", None)])

    with pytest.raises(UnprocessableEntityError, match="Size already exists for this meal"):
        MealService.update_size_cost(db_session, meal.id, {"size": 1, "cost": "9"})


def test_update_size_cost_size_used_by_another_record(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category, size_costs=[(1, "8.00", None), (2, "10.00", None)])
    small = meal.size_costs[0]

    with pytest.raises(
        UnprocessableEntityError,
        match="Size already exists for this meal with another record",
    ):
        MealService.update_size_cost(
            db_session, meal.id, {"id": small.id, "size": 2, "cost": "9"}
        )


def test_update_size_cost_by_id(db_session: Session):
    """Omitting number_of_pieces keeps the stored value."""
    category = make_category(db_session)
    meal = make_meal(db_session, category, size_costs=[(1, "8.00", 4)])
    variant = meal.size_costs[0]

    entry = MealService.update_size_cost(
        db_session, meal.id, {"id": variant.id, "size": 3, "cost": "13.50"}
    )

    assert entry == {
        "id": variant.id,
        "meal_id": meal.id,
        "size": 3,
        "cost": Decimal("13.50"),
        "number_of_pieces": 4,
    }


def test_update_size_cost_id_of_other_meal(db_session: Session):
    category = make_category(db_session)
    curry = make_meal(db_session, category, name="Chicken Curry")
    stew = make_meal(db_session, category, name="Beef Stew")

    with pytest.raises(NotFoundError, match="Size cost not found"):
        MealService.update_size_cost(
            db_session, curry.id, {"id": stew.size_costs[0].id, "size": 2, "cost": "5"}
        )


def test_update_size_cost_invalid_fields(db_session: Session):
    category = make_category(db_session)
    meal = make_meal(db_session, category)

    with pytest.raises(ServiceValidationError):
        MealService.update_size_cost(db_session, meal.id, {"size": 7, "cost": "0"})


# =============================================================================
# DELETE
# =============================================================================


def test_delete_meal_removes_variants_and_image(db_session: Session, media_root):
    category = make_category(db_session)
    created = create_via_service(db_session, category)
    image = media_root / created.image

    MealService.delete_meal(db_session, created.id)

    assert not image.exists()
    assert db_session.query(MealSizeCost).count() == 0
    with pytest.raises(NotFoundError):
        MealService.list_size_costs(db_session, created.id)


def test_delete_missing_meal(db_session: Session):
    with pytest.raises(NotFoundError):
        MealService.delete_meal(db_session, 999)


# =============================================================================
# PAGINATED FILTERS
# =============================================================================


def test_filter_by_category_paginates(db_session: Session):
    category = make_category(db_session)
    for letter in "ABCDEFGHIJKLM":
        make_meal(db_session, category, name=f"Dish {letter}")

    first, pagination = MealService.filter_by_category(db_session, category.id, 1, False)
    second, _ = MealService.filter_by_category(db_session, category.id, 2, False)

    assert len(first) == settings.meals_per_page
    assert [m.name for m in second] == ["Dish M"]
    assert pagination.model_dump() == {
        "total": 13,
        "per_page": 12,
        "current_page": 1,
        "last_page": 2,
    }


def test_filter_by_category_page_below_one_is_first_page(db_session: Session):
    category = make_category(db_session)
    make_meal(db_session, category)

    meals, pagination = MealService.filter_by_category(db_session, category.id, 0, False)

    assert len(meals) == 1
    assert pagination.current_page == 1


def test_filter_by_category_page_past_last(db_session: Session):
    category = make_category(db_session)
    for letter in "ABCDEFGHIJKL":
        make_meal(db_session, category, name=f"Dish {letter}")

    with pytest.raises(ServiceValidationError, match=PAGE_OVERFLOW):
        MealService.filter_by_category(db_session, category.id, 3, False)


def test_filter_by_category_unknown_and_empty(db_session: Session):
    category = make_category(db_session)

    with pytest.raises(NotFoundError, match="Category not found"):
        MealService.filter_by_category(db_session, category.id + 1, 1, True)
    with pytest.raises(NotFoundError, match="No meals found for this category"):
        MealService.filter_by_category(db_session, category.id, 1, True)


def test_filter_by_type(db_session: Session):
    category = make_category(db_session)
    make_meal(db_session, category, name="Garden Salad", meal_type="vegetarian")
    make_meal(db_session, category, name="Chicken Curry")

    meals, _ = MealService.filter_by_type(db_session, "vegetarian", 1, False)

    assert [m.name for m in meals] == ["Garden Salad"]


def test_filter_by_type_invalid(db_session: Session):
    with pytest.raises(ServiceValidationError, match="Invalid type"):
        MealService.filter_by_type(db_session, "spicy", 1, True)


def test_filter_by_status_inactive_hidden_from_non_admin(db_session: Session):
    category = make_category(db_session)
    make_meal(db_session, category, name="Beef Stew", status=False)

    with pytest.raises(NotFoundError):
        MealService.filter_by_status(db_session, "inactive", 1, caller_is_admin=False)

    meals, _ = MealService.filter_by_status(db_session, "inactive", 1, caller_is_admin=True)
    assert [m.name for m in meals] == ["Beef Stew"]


def test_filter_by_status_invalid_token(db_session: Session):
    with pytest.raises(ServiceValidationError, match="Invalid status value"):
        MealService.filter_by_status(db_session, "archived", 1, True)


# =============================================================================
# SEARCH
# =============================================================================


def test_filter_meals_cost_comes_from_first_matching_variant(db_session: Session):
    """
    Verifies:
    - The projected cost is the first variant matching every numeric filter
    - With numeric filters split across variants, the meal matches but cost is null
    """
    category = make_category(db_session)
    make_meal(
        db_session,
        category,
        name="Sushi Platter",
        size_costs=[(1, "12.00", None), (2, "9.00", None), (3, "12.00", 6)],
    )

    by_cost = MealService.filter_meals(db_session, {"cost": Decimal("12")}, True)
    by_pieces = MealService.filter_meals(
        db_session, {"cost": Decimal("12"), "number_of_pieces": 6}, True
    )
    split = MealService.filter_meals(db_session, {"size": 2, "number_of_pieces": 6}, True)

    assert by_cost[0].cost == Decimal("12.00")
    assert by_pieces[0].cost == Decimal("12.00")
    assert split[0].name == "Sushi Platter"
    assert split[0].cost is None


def test_filter_meals_no_numeric_filters_uses_first_variant(db_session: Session):
    category = make_category(db_session)
    make_meal(db_session, category, size_costs=[(2, "9.00", None), (1, "5.00", None)])

    results = MealService.filter_meals(db_session, {"name": "curry"}, False)

    assert results[0].cost == Decimal("9.00")


def test_filter_meals_excludes_inactive_for_non_admin(db_session: Session):
    category = make_category(db_session)
    make_meal(db_session, category, name="Beef Stew", status=False)

    with pytest.raises(NotFoundError, match="No meals found with the given filters"):
        MealService.filter_meals(db_session, {"name": "stew"}, False)

    assert len(MealService.filter_meals(db_session, {"name": "stew"}, True)) == 1
