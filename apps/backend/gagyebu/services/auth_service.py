from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .. import models, schemas
from ..core.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from ..core.security import hash_password, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt 입력 한도
MAX_PASSWORD_BYTES = 72

INVALID_CREDENTIALS = "이메일 또는 비밀번호가 올바르지 않습니다"


def validate_new_password(password: str, message: str = "비밀번호는 최소 6자 이상이어야 합니다") -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequestError(message)
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise BadRequestError("비밀번호가 너무 깁니다")


class AuthService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _active_user(self, user_id: int) -> models.User:
        user = (
            self.db.query(models.User)
            .filter(models.User.id == user_id, models.User.deleted_at.is_(None))
            .first()
        )
        if user is None:
            raise NotFoundError("사용자를 찾을 수 없습니다")
        return user

    def _by_email(self, email: str) -> models.User | None:
        return (
            self.db.query(models.User)
            .filter(models.User.email == email, models.User.deleted_at.is_(None))
            .first()
        )

    def signup(self, payload: schemas.SignupRequest) -> models.User:
        email = payload.email.strip().lower()
        validate_new_password(payload.password)
        if self._by_email(email) is not None:
            raise ConflictError("이미 사용 중인 이메일입니다")

        user = models.User(
            email=email,
            password_hash=hash_password(payload.password),
            name=(payload.name or "").strip() or None,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("user signed up user_id=%s", user.id)
        return user

    def login(self, payload: schemas.LoginRequest) -> models.User:
        user = self._by_email(payload.email.strip().lower())
        if user is None or not verify_password(payload.password, user.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS)
        return user

    def change_password(self, payload: schemas.PasswordChangeRequest) -> None:
        validate_new_password(payload.new_password, "새 비밀번호는 최소 6자 이상이어야 합니다")
        user = self._active_user(payload.user_id)
        if not verify_password(payload.current_password, user.password_hash):
            raise UnauthorizedError("현재 비밀번호가 일치하지 않습니다")
        user.password_hash = hash_password(payload.new_password)
        self.db.commit()

    def delete_account(self, payload: schemas.AccountDeleteRequest) -> None:
        if not payload.password:
            raise BadRequestError("비밀번호를 입력해주세요")
        user = self._active_user(payload.user_id)
        if not verify_password(payload.password, user.password_hash):
            raise UnauthorizedError("비밀번호가 일치하지 않습니다")
        user.soft_delete()
        self.db.commit()
        logger.info("user account deleted user_id=%s", user.id)
