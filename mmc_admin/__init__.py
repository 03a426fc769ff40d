# Import all models to ensure they are registered with SQLModel
from mmc_admin.models import blog, testimonial, contact, newsletter, user
from mmc_admin.core import config
from mmc_admin.database import engine

__all__ = [
    "blog",
    "testimonial",
    "contact",
    "newsletter",
    "user",
    "config",
    "engine",
]
