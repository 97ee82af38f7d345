from __future__ import annotations

import pytest

from gagyebu import models
from gagyebu.utils.kst import kst_today


@pytest.fixture()
def make_goal(client, demo_user):
    def _make(name: str = "여행", target_amount: int = 2_000_000, current_amount: int = 0, **extra) -> dict:
        today = kst_today()
        body = {
            "user_id": demo_user.id,
            "name": name,
            "icon": "✈️",
            "target_amount": target_amount,
            "current_amount": current_amount,
            "target_year": today.year + 1,
            "target_month": today.month,
        }
        body.update(extra)
        r = client.post("/api/savings", json=body)
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make


def test_deposit_updates_goal_and_creates_one_transaction(client, db_session, demo_user, make_goal):
    goal = make_goal(current_amount=100_000)

    r = client.post(f"/api/savings/{goal['id']}/deposit", json={"user_id": demo_user.id, "amount": 50_000})
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "50,000원이 저축되었습니다"
    data = r.json()["data"]
    assert data["savings_goal"]["current_amount"] == 150_000
    txn = data["transaction"]
    assert txn["type"] == "EXPENSE"
    assert txn["amount"] == 50_000
    assert txn["savings_goal_id"] == goal["id"]
    assert txn["category_id"] is None
    assert txn["description"] == "여행 저축"

    linked = db_session.query(models.Transaction).filter(models.Transaction.savings_goal_id == goal["id"]).all()
    assert len(linked) == 1


@pytest.mark.parametrize("amount", [0, -5_000])
def test_deposit_rejects_non_positive_amount(client, db_session, demo_user, make_goal, amount):
    goal = make_goal(current_amount=100_000)

    r = client.post(f"/api/savings/{goal['id']}/deposit", json={"user_id": demo_user.id, "amount": amount})
    assert r.status_code == 400
    assert "error" in r.json()

    db_session.expire_all()
    row = db_session.get(models.SavingsGoal, goal["id"])
    assert row.current_amount == 100_000
    assert db_session.query(models.Transaction).count() == 0


def test_deposit_requires_amount(client, demo_user, make_goal):
    goal = make_goal()
    r = client.post(f"/api/savings/{goal['id']}/deposit", json={"user_id": demo_user.id})
    assert r.status_code == 400
    assert r.json() == {"error": "amount is required"}


def test_deposit_unknown_goal(client, demo_user):
    r = client.post("/api/savings/9999/deposit", json={"user_id": demo_user.id, "amount": 1_000})
    assert r.status_code == 404
    assert r.json() == {"error": "Savings goal not found"}


def test_savings_summary_scenario(client, demo_user, make_goal):
    make_goal("A", target_amount=2_000_000, current_amount=500_000)
    make_goal("B", target_amount=5_000_000, current_amount=1_000_000)

    r = client.get("/api/savings/summary", params={"user_id": demo_user.id})
    assert r.status_code == 200
    assert r.json()["data"] == {
        "total_current_amount": 1_500_000,
        "total_target_amount": 7_000_000,
        "goals_count": 2,
        "progress_percent": 21,
    }


def test_savings_summary_empty(client, demo_user):
    data = client.get("/api/savings/summary", params={"user_id": demo_user.id}).json()["data"]
    assert data == {"total_current_amount": 0, "total_target_amount": 0, "goals_count": 0, "progress_percent": 0}


def test_list_active_goals_with_progress(client, demo_user, make_goal):
    today = kst_today()
    active = make_goal("여행", target_amount=2_400_000, current_amount=0)
    # 지난 달 목표는 목록에서 제외
    past_year, past_month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
    make_goal("지난목표", target_year=past_year, target_month=past_month)

    client.post(f"/api/savings/{active['id']}/deposit", json={"user_id": demo_user.id, "amount": 200_000})

    r = client.get("/api/savings", params={"user_id": demo_user.id})
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 1
    goal = body["data"][0]
    assert goal["id"] == active["id"]
    assert goal["months_remaining"] == 12
    assert goal["amount_remaining"] == 2_200_000
    assert goal["monthly_required"] == 183_334
    assert goal["progress_percent"] == 8
    assert goal["this_month_savings"] == 200_000
    assert goal["target_date"] == f"{today.year + 1}년 {today.month}월 목표"


def test_primary_flag_is_exclusive(client, demo_user, make_goal):
    a = make_goal("A")
    b = make_goal("B")

    r = client.patch(f"/api/savings/{a['id']}", json={"user_id": demo_user.id, "is_primary": True})
    assert r.json()["data"]["is_primary"] is True
    r = client.put(f"/api/savings/{b['id']}", json={"user_id": demo_user.id, "is_primary": True, "name": "B2"})
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "B2"

    goals = {g["id"]: g for g in client.get("/api/savings", params={"user_id": demo_user.id}).json()["data"]}
    assert goals[b["id"]]["is_primary"] is True
    assert goals[a["id"]]["is_primary"] is False
    # 대표 목표가 먼저
    first = client.get("/api/savings", params={"user_id": demo_user.id}).json()["data"][0]
    assert first["id"] == b["id"]


def test_delete_goal_is_soft(client, db_session, demo_user, make_goal):
    goal = make_goal()
    r = client.delete(f"/api/savings/{goal['id']}", params={"user_id": demo_user.id})
    assert r.status_code == 200
    assert client.get("/api/savings", params={"user_id": demo_user.id}).json()["count"] == 0
    db_session.expire_all()
    assert db_session.get(models.SavingsGoal, goal["id"]).deleted_at is not None

    r = client.delete(f"/api/savings/{goal['id']}", params={"user_id": demo_user.id})
    assert r.status_code == 404


def test_goal_is_scoped_to_owner(client, db_session, demo_user, make_goal):
    goal = make_goal()
    other = models.User(email="other@example.com", password_hash=None)
    db_session.add(other)
    db_session.commit()

    r = client.post(f"/api/savings/{goal['id']}/deposit", json={"user_id": other.id, "amount": 1_000})
    assert r.status_code == 404


def test_create_goal_validation(client, demo_user):
    r = client.post(
        "/api/savings",
        json={"user_id": demo_user.id, "name": "x", "icon": "💰", "target_amount": 0, "target_year": 2030, "target_month": 1},
    )
    assert r.status_code == 400
    r = client.post("/api/savings", json={"user_id": demo_user.id, "icon": "💰", "target_amount": 1000})
    assert r.status_code == 400
    assert r.json()["error"].endswith("is required")


def test_deposit_is_all_or_nothing(client, db_session, demo_user, make_goal, monkeypatch):
    goal = make_goal(current_amount=100_000)

    def _failing_refresh(self, user_id, instant):
        self.db.flush()
        raise RuntimeError("disk full")

    monkeypatch.setattr(
        "gagyebu.services.daily_balance_service.DailyBalanceService.refresh_day", _failing_refresh
    )
    r = client.post(f"/api/savings/{goal['id']}/deposit", json={"user_id": demo_user.id, "amount": 50_000})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to deposit savings"}
    assert "disk full" not in r.text

    db_session.expire_all()
    assert db_session.get(models.SavingsGoal, goal["id"]).current_amount == 100_000
    assert db_session.query(models.Transaction).count() == 0
