from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.errors import guard
from ...schemas import (
    AccountDeleteRequest,
    LoginRequest,
    PasswordChangeRequest,
    SignupRequest,
    UserOut,
)
from ...services import AuthService
from ..responses import success

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", status_code=201)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    with guard("회원가입 처리 중 오류가 발생했습니다"):
        user = AuthService(db).signup(payload)
    return success({"user": UserOut.model_validate(user)}, "회원가입 성공")


@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    with guard("로그인 처리 중 오류가 발생했습니다"):
        user = AuthService(db).login(payload)
    return success({"user": UserOut.model_validate(user)}, "로그인 성공")


@router.patch("/password")
def change_password(payload: PasswordChangeRequest, db: Session = Depends(get_db)):
    with guard("비밀번호 변경 중 오류가 발생했습니다", user_id=payload.user_id):
        AuthService(db).change_password(payload)
    return success(None, "비밀번호가 변경되었습니다")


@router.delete("/account")
def delete_account(payload: AccountDeleteRequest, db: Session = Depends(get_db)):
    with guard("계정 삭제 중 오류가 발생했습니다", user_id=payload.user_id):
        AuthService(db).delete_account(payload)
    return success(None, "계정이 삭제되었습니다")
