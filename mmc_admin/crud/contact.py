# mmc_admin/crud/contact.py
from sqlmodel import Session, select, func
from typing import Mapping, Optional
from datetime import datetime

from mmc_admin.models.contact import ContactSubmission, ContactPriority
from mmc_admin.schemas.contact import ContactSubmissionCreate
from mmc_admin.core.clock import as_utc, utcnow
from mmc_admin.core.query import ListSpec, FilterField, FilterKind, Page, list_records
from mmc_admin.crud.common import get_or_404, apply_changes, save

CONTACT_LIST_SPEC = ListSpec(
    model=ContactSubmission,
    filters=(
        FilterField("read", ContactSubmission.read, FilterKind.BOOLEAN),
        FilterField("replied", ContactSubmission.replied, FilterKind.BOOLEAN),
        FilterField("priority", ContactSubmission.priority, enum=ContactPriority),
    ),
    search_columns=(
        ContactSubmission.name,
        ContactSubmission.email,
        ContactSubmission.subject,
        ContactSubmission.message,
    ),
    sort_fields={
        "createdAt": ContactSubmission.created_at,
        "updatedAt": ContactSubmission.updated_at,
        "priority": ContactSubmission.priority,
        "name": ContactSubmission.name,
        "email": ContactSubmission.email,
    },
    default_limit=20,
)


class ContactSubmissionCRUD:
    def get_submissions(self, db: Session, params: Mapping[str, str]) -> Page:
        return list_records(db, CONTACT_LIST_SPEC, params)

    def get_submission(self, db: Session, submission_id) -> ContactSubmission:
        return get_or_404(db, ContactSubmission, submission_id, "Contact submission")

    def create_submission(self, db: Session, data: ContactSubmissionCreate) -> ContactSubmission:
        submission = ContactSubmission(**data.model_dump())
        return save(db, submission)

    def mark_read(self, db: Session, submission: ContactSubmission, read: bool = True) -> ContactSubmission:
        apply_changes(submission, {"read": read})
        return save(db, submission)

    def mark_replied(self, db: Session, submission: ContactSubmission, replied: bool = True) -> ContactSubmission:
        """Record the reply state. A submission is always read once this is called."""
        apply_changes(submission, {"replied": replied, "read": True})
        return save(db, submission)

    def set_priority(self, db: Session, submission: ContactSubmission, priority: ContactPriority) -> ContactSubmission:
        apply_changes(submission, {"priority": priority})
        return save(db, submission)

    def delete_submission(self, db: Session, submission: ContactSubmission) -> None:
        db.delete(submission)
        db.commit()

    def get_stats(self, db: Session, now: Optional[datetime] = None) -> dict:
        def count(*conditions) -> int:
            query = select(func.count(ContactSubmission.id))
            if conditions:
                query = query.where(*conditions)
            return db.exec(query).one()

        start_of_day = as_utc(now or utcnow()).replace(hour=0, minute=0, second=0, microsecond=0)

        total = count()
        unread = count(ContactSubmission.read == False)
        return {
            "total_submissions": total,
            "unread_submissions": unread,
            "today_submissions": count(ContactSubmission.created_at >= start_of_day),
            "high_priority_submissions": count(
                ContactSubmission.priority == ContactPriority.high,
                ContactSubmission.read == False,
            ),
            "read_submissions": total - unread,
        }


contact_crud = ContactSubmissionCRUD()
