# mmc_admin/crud/user.py
from sqlmodel import Session, select, or_

from mmc_admin.core.auth import get_password_hash
from mmc_admin.core.config import settings
from mmc_admin.core.exceptions import DuplicateAccountError
from mmc_admin.models.user import User
from mmc_admin.schemas.auth import RegisterRequest


class UserCRUD:
    def create_user(self, db: Session, data: RegisterRequest) -> User:
        """
        Create an admin account.

        Raises:
            DuplicateAccountError: username or email already taken, or the
                username is the built-in superuser's
        """
        email = str(data.email).lower()
        if data.username == settings.SUPERUSER_USERNAME:
            raise DuplicateAccountError()

        existing = db.exec(
            select(User).where(or_(User.username == data.username, User.email == email))
        ).first()
        if existing:
            raise DuplicateAccountError()

        user = User(
            username=data.username,
            email=email,
            password_hash=get_password_hash(data.password),
            role=data.role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user


user_crud = UserCRUD()
