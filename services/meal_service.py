from typing import Any, Dict, List, Mapping, Optional, Tuple
from sqlalchemy.orm import Session, Query
from sqlalchemy.exc import IntegrityError
import logging
import math

from domain.enums import MealType, MealStatusFilter
from domain.mappers import MealMapper
from domain.models import Meal
from domain.schemas.meal_schemas import (
    MealCreate,
    MealUpdate,
    SizeCostUpsert,
    MealFilter,
    MealSummary,
    MealFilterResult,
    Pagination,
)
from domain.schemas.validation import (
    try_validate,
    validate_payload,
    image_errors,
    merge_errors,
    raise_for_errors,
)
from repositories import CategoryRepository, MealRepository, MealSizeCostRepository
from adapters import storage
from app.config import settings
from app.exceptions import (
    InternalServiceError,
    NotFoundError,
    ServiceValidationError,
    UnprocessableEntityError,
)

logger = logging.getLogger("restaurant.meals")

MEAL_IMAGE_DIRECTORY = "meals"

MEAL_NOT_FOUND = "Meal not found"
PAGE_OVERFLOW = "Page number exceeds the last available page"


class MealService:
    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    def list_meals(db: Session, caller_is_admin: bool) -> List[MealSummary]:
        """Every meal visible to the caller, as meal summaries."""
        meals = MealRepository(db).get_visible(caller_is_admin)
        return [MealMapper.to_summary(m) for m in meals]

    @staticmethod
    def get_meal(db: Session, meal_id: int, caller_is_admin: bool) -> MealSummary:
        """
        Get one meal.

        A hidden (inactive) meal looks exactly like a missing one to a
        non-admin caller.
        """
        meal = MealRepository(db).get_by_id(meal_id)
        if not meal or not (caller_is_admin or meal.status):
            raise NotFoundError(MEAL_NOT_FOUND)
        return MealMapper.to_summary(meal)

    @staticmethod
    def list_size_costs(db: Session, meal_id: int) -> List[Dict[str, Any]]:
        if not MealRepository(db).exists(meal_id):
            raise NotFoundError(MEAL_NOT_FOUND)
        size_costs = MealSizeCostRepository(db).get_by_meal_id(meal_id)
        return [MealMapper.to_size_cost_entry(sc) for sc in size_costs]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    def create_meal(db: Session, data: Mapping[str, Any], image) -> MealSummary:
        """
        Add a meal together with its first size/cost variant.

        The image is stored before the transaction starts; if the
        transaction fails the file stays behind.

        Args:
            db: Database session
            data: raw form fields (name, description, type, category_id,
                status, size, cost, number_of_pieces)
            image: uploaded image (UploadFile)

        Returns:
            MealSummary of the new meal

        Raises:
            ServiceValidationError: field errors, duplicate name, unknown category
            InternalServiceError: the insert transaction failed (rolled back)
        """
        payload, errors = try_validate(MealCreate, data)
        errors = merge_errors(errors, MealService._image_error_map(image, required=True))
        if not errors:
            errors = MealService._reference_errors(db, payload.name, payload.category_id)
        raise_for_errors(errors)

        image_path = storage.store(image, MEAL_IMAGE_DIRECTORY)

        meal_repo = MealRepository(db)
        size_cost_repo = MealSizeCostRepository(db)
        try:
            meal = meal_repo.create(
                Meal(
                    name=payload.name,
                    description=payload.description,
                    type=payload.type.value,
                    category_id=payload.category_id,
                    image=image_path,
                    status=payload.status,
                ),
                commit=False,
            )
            size_cost_repo.create_size_cost(
                meal_id=meal.id,
                size=payload.size,
                cost=payload.cost,
                number_of_pieces=payload.number_of_pieces,
                commit=False,
            )
            db.commit()
        except Exception as exc:
            db.rollback()
            logger.exception(f"create_meal transaction failed name={payload.name!r}")
            raise InternalServiceError(str(exc)) from exc

        db.refresh(meal)
        logger.info(
            f"meal_created meal_id={meal.id} name={meal.name!r} "
            f"size={payload.size} cost={payload.cost} image={image_path}"
        )
        return MealMapper.to_summary(meal)

    @staticmethod
    def update_meal(
        db: Session, meal_id: int, data: Mapping[str, Any], image=None
    ) -> MealSummary:
        """
        Apply a sparse patch to a meal and, optionally, one of its variants.

        When any of size/cost/number_of_pieces is supplied, the variant with
        the supplied size is updated, or created when the meal has none of
        that size. Only supplied variant fields are changed.

        Raises:
            NotFoundError: meal does not exist
            ServiceValidationError: field errors; size missing while a variant
                field is given; cost missing for a new variant
            UnprocessableEntityError: a concurrent writer created the same size
        """
        meal_repo = MealRepository(db)
        size_cost_repo = MealSizeCostRepository(db)

        meal = meal_repo.get_by_id(meal_id)
        if not meal:
            raise NotFoundError(MEAL_NOT_FOUND)

        patch, errors = try_validate(MealUpdate, data)
        errors = merge_errors(errors, MealService._image_error_map(image, required=False))

        changes: Dict[str, Any] = {}
        target_size_cost = None
        if patch is not None:
            changes = patch.meal_changes()
            errors = merge_errors(
                errors,
                MealService._reference_errors(
                    db, changes.get("name"), changes.get("category_id"), ignore_id=meal.id
                ),
            )
            if patch.touches_size_cost():
                if patch.size is None:
                    errors = merge_errors(
                        errors,
                        {"size": ["The size field is required when cost or number_of_pieces is present."]},
                    )
                else:
                    target_size_cost = size_cost_repo.get_by_meal_and_size(meal.id, patch.size)
                    if target_size_cost is None and patch.cost is None:
                        errors = merge_errors(
                            errors, {"cost": ["The cost field is required for a new size."]}
                        )
        raise_for_errors(errors)

        if MealService._has_upload(image):
            if meal.image:
                storage.delete(meal.image)
            changes["image"] = storage.store(image, MEAL_IMAGE_DIRECTORY)

        for field, value in changes.items():
            setattr(meal, field, value)

        try:
            if patch.touches_size_cost():
                if target_size_cost is not None:
                    if patch.cost is not None:
                        target_size_cost.cost = patch.cost
                    if "number_of_pieces" in patch.model_fields_set:
                        target_size_cost.number_of_pieces = patch.number_of_pieces
                else:
                    size_cost_repo.create_size_cost(
                        meal_id=meal.id,
                        size=patch.size,
                        cost=patch.cost,
                        number_of_pieces=patch.number_of_pieces,
                        commit=False,
                    )
            meal_repo.update(meal)
        except IntegrityError as exc:
            db.rollback()
            logger.warning(f"update_meal rejected: meal_id={meal_id} duplicate size")
            raise UnprocessableEntityError("Size already exists for this meal") from exc

        logger.info(
            f"meal_updated meal_id={meal_id} fields={sorted(changes)} "
            f"size_cost={'yes' if patch.touches_size_cost() else 'no'}"
        )
        return MealMapper.to_summary(meal)

    @staticmethod
    def update_size_cost(
        db: Session, meal_id: int, data: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """
        Upsert one size/cost variant of a meal.

        With ``id``: update that variant; its new size must not belong to a
        different variant of the same meal. Without ``id``: create a
        variant; the size must be new for this meal.

        Raises:
            NotFoundError: meal, or the variant with ``id``, does not exist
            ServiceValidationError: invalid fields
            UnprocessableEntityError: size already used by another variant
        """
        if not MealRepository(db).exists(meal_id):
            raise NotFoundError(MEAL_NOT_FOUND)

        payload = validate_payload(SizeCostUpsert, data)
        repo = MealSizeCostRepository(db)

        try:
            if payload.id is not None:
                size_cost = repo.get_for_meal(meal_id, payload.id)
                if not size_cost:
                    raise NotFoundError("Size cost not found")
                if repo.get_by_meal_and_size(meal_id, payload.size, exclude_id=size_cost.id):
                    raise UnprocessableEntityError(
                        "Size already exists for this meal with another record"
                    )
                size_cost.size = payload.size
                size_cost.cost = payload.cost
                if "number_of_pieces" in payload.model_fields_set:
                    size_cost.number_of_pieces = payload.number_of_pieces
                repo.update(size_cost)
                action = "updated"
            else:
                if repo.get_by_meal_and_size(meal_id, payload.size):
                    raise UnprocessableEntityError("Size already exists for this meal")
                size_cost = repo.create_size_cost(
                    meal_id=meal_id,
                    size=payload.size,
                    cost=payload.cost,
                    number_of_pieces=payload.number_of_pieces,
                )
                action = "created"
        except IntegrityError as exc:
            db.rollback()
            raise UnprocessableEntityError("Size already exists for this meal") from exc
        except UnprocessableEntityError:
            logger.warning(
                f"update_size_cost rejected: meal_id={meal_id} size={payload.size} taken"
            )
            raise

        logger.info(
            f"size_cost_{action} meal_id={meal_id} size_cost_id={size_cost.id} "
            f"size={size_cost.size} cost={size_cost.cost}"
        )
        return MealMapper.to_size_cost_entry(size_cost)

    @staticmethod
    def delete_meal(db: Session, meal_id: int) -> None:
        """Delete a meal's image, its variants, then the meal itself."""
        repo = MealRepository(db)
        meal = repo.get_by_id(meal_id)
        if not meal:
            raise NotFoundError(MEAL_NOT_FOUND)

        if meal.image:
            storage.delete(meal.image)
        repo.delete_with_size_costs(meal)
        logger.info(f"meal_deleted meal_id={meal_id}")

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    @staticmethod
    def filter_by_category(
        db: Session, category_id: int, page: int, caller_is_admin: bool
    ) -> Tuple[List[MealSummary], Pagination]:
        if not CategoryRepository(db).exists(category_id):
            raise NotFoundError("Category not found")
        repo = MealRepository(db)
        return MealService._paginate(
            repo,
            repo.by_category(category_id, caller_is_admin),
            page,
            "No meals found for this category",
        )

    @staticmethod
    def filter_by_type(
        db: Session, meal_type: str, page: int, caller_is_admin: bool
    ) -> Tuple[List[MealSummary], Pagination]:
        try:
            parsed = MealType(meal_type)
        except ValueError:
            raise ServiceValidationError("Invalid type")
        repo = MealRepository(db)
        return MealService._paginate(
            repo,
            repo.by_type(parsed.value, caller_is_admin),
            page,
            "No meals found for this type",
        )

    @staticmethod
    def filter_by_status(
        db: Session, status: str, page: int, caller_is_admin: bool
    ) -> Tuple[List[MealSummary], Pagination]:
        """
        Meals with the given status token (active/inactive).

        The visibility rule still applies, so a non-admin asking for
        inactive meals always gets NotFoundError.
        """
        try:
            parsed = MealStatusFilter(status)
        except ValueError:
            raise ServiceValidationError(
                "Invalid status value. Please enter active or inactive"
            )
        repo = MealRepository(db)
        return MealService._paginate(
            repo,
            repo.by_status(parsed.as_bool(), caller_is_admin),
            page,
            "No meals found for this status",
        )

    @staticmethod
    def filter_meals(
        db: Session, data: Mapping[str, Any], caller_is_admin: bool
    ) -> List[MealFilterResult]:
        """
        Search meals by any subset of name, cost, size, number_of_pieces,
        category_id, status and type.

        Each result carries the cost of its first variant matching all the
        numeric filters, which is not necessarily the cheapest one.
        """
        filters = validate_payload(
            MealFilter, {k: v for k, v in data.items() if v is not None}
        )
        meals = MealRepository(db).search(
            caller_is_admin,
            name=filters.name,
            cost=filters.cost,
            size=filters.size,
            number_of_pieces=filters.number_of_pieces,
            category_id=filters.category_id,
            status=filters.status,
            meal_type=filters.type.value if filters.type else None,
        )
        if not meals:
            raise NotFoundError("No meals found with the given filters")

        numeric = filters.numeric_filters()
        return [MealMapper.to_filter_result(m, numeric) for m in meals]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _paginate(
        repo: MealRepository, query: Query, page: int, empty_message: str
    ) -> Tuple[List[MealSummary], Pagination]:
        # below 1 means the first page
        page = max(page, 1)

        per_page = settings.meals_per_page
        meals, total = repo.paginate(query, page, per_page)
        last_page = max(1, math.ceil(total / per_page))

        if page > last_page:
            raise ServiceValidationError(PAGE_OVERFLOW)
        if not meals:
            raise NotFoundError(empty_message)

        pagination = Pagination(
            total=total, per_page=per_page, current_page=page, last_page=last_page
        )
        return [MealMapper.to_summary(m) for m in meals], pagination

    @staticmethod
    def _has_upload(image) -> bool:
        return image is not None and bool(getattr(image, "filename", None))

    @staticmethod
    def _image_error_map(image, required: bool) -> Dict[str, List[str]]:
        messages = image_errors(image, required=required)
        return {"image": messages} if messages else {}

    @staticmethod
    def _reference_errors(
        db: Session,
        name: Optional[str],
        category_id: Optional[int],
        ignore_id: Optional[int] = None,
    ) -> Dict[str, List[str]]:
        """Checks that need the database: unique name, existing category."""
        errors: Dict[str, List[str]] = {}
        if name is not None and MealRepository(db).name_taken(name, ignore_id=ignore_id):
            errors["name"] = ["The name has already been taken."]
        if category_id is not None and not CategoryRepository(db).exists(category_id):
            errors["category_id"] = ["The selected category id is invalid."]
        return errors
