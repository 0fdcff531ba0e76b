"""Pydantic schemas for meals and their size/cost variants."""

from decimal import Decimal
from typing import Annotated, ClassVar, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field, field_serializer

from domain.enums import MealType

NAME_MIN_LETTERS = 3
NAME_MAX_LETTERS = 50
NAME_EXTRA_CHARS = {"'", "&"}
NAME_MAX_LENGTH = 255


def check_meal_name(value: str) -> str:
    """Letters, whitespace, apostrophes and ampersands; 3-50 letters; ends with a letter."""
    if any(not (ch.isalpha() or ch.isspace() or ch in NAME_EXTRA_CHARS) for ch in value):
        raise ValueError(
            "The name may only contain letters, spaces, apostrophes and ampersands."
        )
    letters = sum(1 for ch in value if ch.isalpha())
    if not NAME_MIN_LETTERS <= letters <= NAME_MAX_LETTERS:
        raise ValueError(
            f"The name must contain between {NAME_MIN_LETTERS} and {NAME_MAX_LETTERS} letters."
        )
    if not value[-1].isalpha():
        raise ValueError("The name must end with a letter.")
    return value


def check_description(value: str) -> str:
    text = value.strip()
    if not text:
        raise ValueError("The description must not be blank.")
    # one line of text; surrounding whitespace is allowed
    if "\n" in text:
        raise ValueError("The description must be a single line.")
    return value


def blank_to_none(value):
    """Form fields send an empty string for 'no value'."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


MealName = Annotated[
    str, Field(max_length=NAME_MAX_LENGTH), AfterValidator(check_meal_name)
]
Description = Annotated[
    str, Field(min_length=10, max_length=255), AfterValidator(check_description)
]
Size = Annotated[int, Field(ge=1, le=4)]
Cost = Annotated[Decimal, Field(ge=1)]
NumberOfPieces = Annotated[
    Optional[Annotated[int, Field(ge=1)]], BeforeValidator(blank_to_none)
]


class MealCreate(BaseModel):
    """Fields accepted when adding a meal (the image is validated separately)"""

    name: MealName
    description: Description
    type: MealType
    category_id: int
    status: bool = True
    size: Size
    cost: Cost
    number_of_pieces: NumberOfPieces = None


class MealUpdate(BaseModel):
    """
    Sparse meal patch. Only keys present in ``model_fields_set`` are applied;
    an omitted key keeps the stored value.
    """

    MEAL_FIELDS: ClassVar[tuple] = ("name", "description", "type", "category_id", "status")
    SIZE_COST_FIELDS: ClassVar[tuple] = ("size", "cost", "number_of_pieces")

    name: Optional[MealName] = None
    description: Optional[Description] = None
    type: Optional[MealType] = None
    category_id: Optional[int] = None
    status: Optional[bool] = None
    size: Optional[Size] = None
    cost: Optional[Cost] = None
    number_of_pieces: NumberOfPieces = None

    def meal_changes(self) -> dict:
        """Supplied, non-null meal columns."""
        supplied = self.model_dump(
            include=set(self.MEAL_FIELDS), exclude_unset=True, mode="json"
        )
        return {k: v for k, v in supplied.items() if v is not None}

    def touches_size_cost(self) -> bool:
        return any(f in self.model_fields_set for f in self.SIZE_COST_FIELDS)


class SizeCostUpsert(BaseModel):
    """Explicit size/cost upsert, keyed by ``id`` when given"""

    id: Optional[Annotated[int, Field(ge=1)]] = None
    size: Size
    cost: Cost
    number_of_pieces: NumberOfPieces = None


class MealFilter(BaseModel):
    """Dynamic filters for the meal search endpoint. None means 'not filtered'."""

    NUMERIC_FIELDS: ClassVar[tuple] = ("cost", "size", "number_of_pieces")

    name: Optional[str] = None
    cost: Optional[Decimal] = None
    size: Optional[int] = None
    number_of_pieces: Optional[int] = None
    category_id: Optional[int] = None
    status: Optional[bool] = None
    type: Optional[MealType] = None

    def numeric_filters(self) -> dict:
        return {
            k: getattr(self, k) for k in self.NUMERIC_FIELDS if getattr(self, k) is not None
        }


class MealSummary(BaseModel):
    """Meal with its cheapest size/cost variant"""

    id: int
    name: str
    description: str
    image: Optional[str]
    type: str
    status: bool
    category_id: int
    category_name: Optional[str]
    cost: Optional[Decimal]
    size: Optional[int]
    number_of_pieces: Optional[int]

    @field_serializer("cost")
    def serialize_cost(self, cost: Optional[Decimal]) -> Optional[float]:
        return float(cost) if cost is not None else None


class MealFilterResult(BaseModel):
    """Meal with the cost of the first variant matching the numeric filters"""

    id: int
    name: str
    description: str
    cost: Optional[Decimal]
    type: str
    category_id: int
    category_name: Optional[str]
    status: bool
    image: Optional[str]

    @field_serializer("cost")
    def serialize_cost(self, cost: Optional[Decimal]) -> Optional[float]:
        return float(cost) if cost is not None else None


class Pagination(BaseModel):
    total: int
    per_page: int
    current_page: int
    last_page: int
