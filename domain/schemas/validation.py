"""
Validation helpers shared by the schema modules.

Turns pydantic errors into the field -> messages map carried by
ServiceValidationError, and checks uploaded images.
"""

from pathlib import PurePath
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.exceptions import ServiceValidationError

SchemaType = TypeVar("SchemaType", bound=BaseModel)

ALLOWED_IMAGE_EXTENSIONS = {"jpeg", "png", "jpg", "gif", "bmp", "svg"}

FieldErrors = Dict[str, List[str]]


def _clean_message(message: str) -> str:
    # pydantic prefixes messages raised from custom validators
    prefix = "Value error, "
    return message[len(prefix):] if message.startswith(prefix) else message


def collect_errors(errors: Iterable[Mapping[str, Any]]) -> FieldErrors:
    """Group pydantic-style error dicts by the field they refer to."""
    grouped: FieldErrors = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "form")]
        field = loc[0] if loc else "request"
        grouped.setdefault(field, []).append(_clean_message(error.get("msg", "Invalid value")))
    return grouped


def merge_errors(*maps: Optional[FieldErrors]) -> FieldErrors:
    merged: FieldErrors = {}
    for errors in maps:
        for field, messages in (errors or {}).items():
            merged.setdefault(field, []).extend(messages)
    return merged


def raise_for_errors(errors: FieldErrors) -> None:
    if errors:
        raise ServiceValidationError("Validation failed", details=errors)


def try_validate(schema: Type[SchemaType], data: Mapping[str, Any]):
    """
    Validate ``data`` against ``schema`` without raising.

    Returns:
        (model, {}) on success or (None, field_errors) on failure
    """
    try:
        return schema.model_validate(dict(data)), {}
    except ValidationError as exc:
        return None, collect_errors(exc.errors())


def validate_payload(schema: Type[SchemaType], data: Mapping[str, Any]) -> SchemaType:
    """
    Validate ``data`` against ``schema``.

    Raises:
        ServiceValidationError: with a field -> messages map in ``details``
    """
    model, errors = try_validate(schema, data)
    raise_for_errors(errors)
    return model


def image_errors(upload, required: bool) -> List[str]:
    """
    Check an uploaded file is an accepted image.

    Args:
        upload: object exposing ``filename`` and ``content_type`` (UploadFile)
        required: whether a missing upload is an error
    """
    if upload is None or not getattr(upload, "filename", None):
        return ["The image field is required."] if required else []

    extension = PurePath(upload.filename).suffix.lower().lstrip(".")
    content_type = (getattr(upload, "content_type", None) or "").lower()
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        return [
            "The image must be a file of type: "
            + ", ".join(sorted(ALLOWED_IMAGE_EXTENSIONS))
            + "."
        ]
    if content_type and not content_type.startswith("image/"):
        return ["The image must be an image."]
    return []
