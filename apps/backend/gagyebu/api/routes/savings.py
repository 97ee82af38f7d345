from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.errors import guard
from ...schemas import (
    SavingsDepositOut,
    SavingsDepositRequest,
    SavingsGoalCreate,
    SavingsGoalOut,
    SavingsGoalPrimaryUpdate,
    SavingsGoalUpdate,
    TransactionOut,
)
from ...services import SavingsService
from ...utils.formatters import format_number
from ..responses import success, success_list

router = APIRouter(prefix="/savings", tags=["savings"])


@router.get("")
def list_savings_goals(user_id: int = Query(..., ge=1), db: Session = Depends(get_db)):
    with guard("Failed to fetch savings goals", user_id=user_id):
        goals = SavingsService(db).list_active(user_id)
    return success_list(goals)


@router.post("", status_code=201)
def create_savings_goal(payload: SavingsGoalCreate, db: Session = Depends(get_db)):
    with guard("Failed to create savings goal", user_id=payload.user_id):
        goal = SavingsService(db).create(payload)
    return success(SavingsGoalOut.model_validate(goal), "저축 목표가 생성되었습니다")


@router.get("/summary")
def savings_summary(user_id: int = Query(..., ge=1), db: Session = Depends(get_db)):
    with guard("Failed to fetch savings summary", user_id=user_id):
        result = SavingsService(db).summary(user_id)
    return success(result)


@router.put("/{goal_id}")
def update_savings_goal(goal_id: int, payload: SavingsGoalUpdate, db: Session = Depends(get_db)):
    with guard("Failed to update savings goal", user_id=payload.user_id, goal_id=goal_id):
        goal = SavingsService(db).update(goal_id, payload)
    return success(SavingsGoalOut.model_validate(goal))


@router.patch("/{goal_id}")
def set_primary_savings_goal(goal_id: int, payload: SavingsGoalPrimaryUpdate, db: Session = Depends(get_db)):
    with guard("Failed to update primary savings goal", user_id=payload.user_id, goal_id=goal_id):
        goal = SavingsService(db).set_primary(goal_id, payload.user_id, payload.is_primary)
    return success(SavingsGoalOut.model_validate(goal))


@router.delete("/{goal_id}")
def delete_savings_goal(goal_id: int, user_id: int = Query(..., ge=1), db: Session = Depends(get_db)):
    with guard("Failed to delete savings goal", user_id=user_id, goal_id=goal_id):
        SavingsService(db).delete(goal_id, user_id)
    return success(None, "저축 목표가 삭제되었습니다")


@router.post("/{goal_id}/deposit")
def deposit_savings(goal_id: int, payload: SavingsDepositRequest, db: Session = Depends(get_db)):
    with guard("Failed to deposit savings", user_id=payload.user_id, goal_id=goal_id):
        goal, txn = SavingsService(db).deposit(goal_id, payload.user_id, payload.amount)
    result = SavingsDepositOut(
        savings_goal=SavingsGoalOut.model_validate(goal),
        transaction=TransactionOut.model_validate(txn),
    )
    return success(result, f"{format_number(payload.amount)}원이 저축되었습니다")
