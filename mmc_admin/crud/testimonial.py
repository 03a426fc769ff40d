# mmc_admin/crud/testimonial.py
from sqlmodel import Session, select, func
from typing import List, Mapping

from mmc_admin.models.testimonial import Testimonial
from mmc_admin.schemas.testimonial import TestimonialCreate, TestimonialUpdate
from mmc_admin.core.query import ListSpec, FilterField, FilterKind, Page, list_records
from mmc_admin.crud.common import get_or_404, apply_changes, save

TESTIMONIAL_SORT_FIELDS = {
    "createdAt": Testimonial.created_at,
    "updatedAt": Testimonial.updated_at,
    "rating": Testimonial.rating,
    "name": Testimonial.name,
    "company": Testimonial.company,
}

# Admin listing: every testimonial, rating matched exactly
ADMIN_LIST_SPEC = ListSpec(
    model=Testimonial,
    filters=(
        FilterField("active", Testimonial.active, FilterKind.BOOLEAN),
        FilterField("featured", Testimonial.featured, FilterKind.BOOLEAN),
        FilterField("rating", Testimonial.rating, FilterKind.INT_EQUALS),
    ),
    search_columns=(Testimonial.name, Testimonial.company, Testimonial.testimonial),
    sort_fields=TESTIMONIAL_SORT_FIELDS,
    default_limit=20,
)

# Public listing: active only, rating is a minimum
PUBLIC_LIST_SPEC = ListSpec(
    model=Testimonial,
    filters=(
        FilterField("featured", Testimonial.featured, FilterKind.BOOLEAN),
        FilterField("rating", Testimonial.rating, FilterKind.INT_AT_LEAST),
    ),
    sort_fields=TESTIMONIAL_SORT_FIELDS,
    default_limit=10,
    forced=(Testimonial.active == True,),
)

NOT_NULL_FIELDS = ("name", "company", "rating", "active", "featured", "source", "verified")


class TestimonialCRUD:
    def get_all_testimonials(self, db: Session, params: Mapping[str, str]) -> Page:
        return list_records(db, ADMIN_LIST_SPEC, params)

    def get_public_testimonials(self, db: Session, params: Mapping[str, str]) -> Page:
        return list_records(db, PUBLIC_LIST_SPEC, params)

    def get_featured_testimonials(self, db: Session, limit: int = 5) -> List[Testimonial]:
        query = (
            select(Testimonial)
            .where(Testimonial.featured == True, Testimonial.active == True)
            .order_by(Testimonial.created_at.desc(), Testimonial.id.desc())
            .limit(limit)
        )
        return list(db.exec(query).all())

    def get_testimonial(self, db: Session, testimonial_id) -> Testimonial:
        return get_or_404(db, Testimonial, testimonial_id, "Testimonial")

    def create_testimonial(self, db: Session, data: TestimonialCreate) -> Testimonial:
        testimonial = Testimonial(**data.model_dump(exclude_none=True))
        return save(db, testimonial)

    def update_testimonial(self, db: Session, testimonial: Testimonial, data: TestimonialUpdate) -> Testimonial:
        changes = data.model_dump(exclude_unset=True)
        for field in NOT_NULL_FIELDS:
            if changes.get(field, "") is None:
                del changes[field]
        apply_changes(testimonial, changes)
        return save(db, testimonial)

    def delete_testimonial(self, db: Session, testimonial: Testimonial) -> None:
        db.delete(testimonial)
        db.commit()

    def toggle_active(self, db: Session, testimonial: Testimonial) -> Testimonial:
        apply_changes(testimonial, {"active": not testimonial.active})
        return save(db, testimonial)

    def toggle_featured(self, db: Session, testimonial: Testimonial) -> Testimonial:
        apply_changes(testimonial, {"featured": not testimonial.featured})
        return save(db, testimonial)

    def get_stats(self, db: Session) -> dict:
        """Counts, average active rating and active rating distribution."""
        def count(*conditions) -> int:
            query = select(func.count(Testimonial.id))
            if conditions:
                query = query.where(*conditions)
            return db.exec(query).one()

        average = db.exec(
            select(func.avg(Testimonial.rating)).where(Testimonial.active == True)
        ).one()

        distribution = db.exec(
            select(Testimonial.rating, func.count(Testimonial.id))
            .where(Testimonial.active == True)
            .group_by(Testimonial.rating)
            .order_by(Testimonial.rating)
        ).all()

        return {
            "total_testimonials": count(),
            "active_testimonials": count(Testimonial.active == True),
            "featured_testimonials": count(Testimonial.featured == True, Testimonial.active == True),
            "verified_testimonials": count(Testimonial.verified == True),
            "average_rating": f"{float(average):.1f}" if average is not None else "0.0",
            "rating_distribution": [
                {"rating": rating, "count": total} for rating, total in distribution
            ],
        }


testimonial_crud = TestimonialCRUD()
