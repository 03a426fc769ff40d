# mmc_admin/crud/common.py
from typing import Any, Dict, Type, TypeVar

from sqlmodel import Session, SQLModel

from mmc_admin.core.clock import utcnow
from mmc_admin.core.exceptions import InvalidIdentifierError, NotFoundError

ModelT = TypeVar("ModelT", bound=SQLModel)

MAX_RECORD_ID = 2**31 - 1


def parse_record_id(raw_id: Any, label: str = "record") -> int:
    """Path ids must be positive integers; anything else is a malformed id."""
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        record_id = raw_id
    else:
        text = str(raw_id).strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidIdentifierError(f"Invalid {label} ID")
        record_id = int(text)

    # Primary keys are 32-bit integer columns
    if record_id < 1 or record_id > MAX_RECORD_ID:
        raise InvalidIdentifierError(f"Invalid {label} ID")
    return record_id


def get_or_404(db: Session, model: Type[ModelT], raw_id: Any, label: str) -> ModelT:
    """
    Fetch a record by path id.

    Raises:
        InvalidIdentifierError: the id is malformed
        NotFoundError: no record has that id
    """
    record = db.get(model, parse_record_id(raw_id, label.lower()))
    if not record:
        raise NotFoundError(f"{label} not found")
    return record


def apply_changes(record: SQLModel, changes: Dict[str, Any]) -> None:
    for field, value in changes.items():
        setattr(record, field, value)
    record.updated_at = utcnow()


def save(db: Session, record: ModelT) -> ModelT:
    db.add(record)
    db.commit()
    db.refresh(record)
    return record
