"""
Request payload parsing for endpoints that take either JSON or multipart.

Multipart requests may carry the record as a JSON string in a ``data`` field
or as plain form fields, alongside an optional file field.
"""
import json
import logging
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from mmc_admin.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def error_fields(exc: PydanticValidationError) -> list[str]:
    fields = []
    for error in exc.errors():
        name = ".".join(str(part) for part in error["loc"]) or "body"
        if name not in fields:
            fields.append(name)
    return fields


def validate_payload(schema: Type[SchemaT], data: Dict[str, Any]) -> SchemaT:
    """Validate raw data against a schema, raising our ValidationError with the offending fields."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        fields = error_fields(e)
        logger.info(f"{schema.__name__} validation failed: {fields}")
        raise ValidationError(f"Invalid or missing fields: {', '.join(fields)}", fields=fields)


def parse_json_object(raw: Any, source: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw) if raw else {}
    except (TypeError, ValueError):
        raise ValidationError(f"Malformed JSON in {source}", fields=[source])
    if not isinstance(data, dict):
        raise ValidationError(f"{source} must be a JSON object", fields=[source])
    return data


async def read_payload(
    request: Request,
    schema: Type[SchemaT],
    file_field: Optional[str] = None
) -> Tuple[SchemaT, Optional[UploadFile]]:
    """
    Read and validate a JSON or multipart request body.

    Args:
        request: Incoming request
        schema: Pydantic schema to validate the record fields against
        file_field: Name of the multipart file field, if the endpoint accepts one

    Returns:
        Tuple of (validated payload, uploaded file or None)
    """
    content_type = request.headers.get("content-type", "")
    upload: Optional[UploadFile] = None

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()

        raw_data = form.get("data")
        if isinstance(raw_data, str) and raw_data.strip():
            data = parse_json_object(raw_data, "data")
        else:
            data = {}
            for key in set(form.keys()):
                if key == file_field:
                    continue
                values = [v for v in form.getlist(key) if isinstance(v, str) and v != ""]
                if not values:
                    continue
                data[key] = values if len(values) > 1 else values[0]

        if file_field:
            candidate = form.get(file_field)
            if isinstance(candidate, UploadFile) and candidate.filename:
                upload = candidate
    else:
        data = parse_json_object(await request.body(), "body")

    return validate_payload(schema, data), upload
