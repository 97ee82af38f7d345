from __future__ import annotations

from datetime import date

from gagyebu import models


def test_transaction_writes_refresh_snapshot(client, db_session, demo_user, make_txn):
    make_txn(100_000, "INCOME", occurred_at="2025-01-10T09:00:00+09:00")
    txn = make_txn(30_000, occurred_at="2025-01-10T20:00:00+09:00")

    row = db_session.query(models.DailyBalance).filter(models.DailyBalance.day == date(2025, 1, 10)).one()
    assert (row.income, row.expense, row.savings, row.balance) == (100_000, 30_000, 0, 70_000)

    client.delete(f"/api/transactions/{txn['id']}", params={"user_id": demo_user.id})
    db_session.expire_all()
    row = db_session.query(models.DailyBalance).filter(models.DailyBalance.day == date(2025, 1, 10)).one()
    assert row.balance == 100_000


def test_earlier_transaction_cascades_to_later_snapshots(client, db_session, make_txn):
    make_txn(50_000, "INCOME", occurred_at="2025-02-05T12:00:00+09:00")
    make_txn(10_000, "INCOME", occurred_at="2025-02-01T12:00:00+09:00")

    db_session.expire_all()
    later = db_session.query(models.DailyBalance).filter(models.DailyBalance.day == date(2025, 2, 5)).one()
    assert later.balance == 60_000


def test_monthly_series(client, demo_user, make_txn):
    make_txn(20_000, "INCOME", occurred_at="2025-02-28T12:00:00+09:00")
    make_txn(100_000, "INCOME", occurred_at="2025-03-01T12:00:00+09:00")
    make_txn(30_000, occurred_at="2025-03-03T12:00:00+09:00")

    r = client.get("/api/daily-balance", params={"user_id": demo_user.id, "year": 2025, "month": 3})
    assert r.status_code == 200, r.text
    series = r.json()["data"]
    assert len(series) == 31
    assert series[0] == {"date": "2025-03-01", "income": 100_000, "expense": 0, "savings": 0, "balance": 120_000}
    assert series[2]["expense"] == 30_000
    assert series[2]["balance"] == 90_000
    assert series[-1]["balance"] == 90_000


def test_save_snapshot_and_recent(client, demo_user):
    r = client.get("/api/daily-balance", params={"user_id": demo_user.id, "days": 3})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "거래 데이터로부터 계산된 잔액입니다"
    assert len(body["data"]) == 3
    assert body["count"] == 3

    payload = {"user_id": demo_user.id, "date": body["data"][-1]["date"], "balance": 12_345, "income": 12_345}
    r = client.post("/api/daily-balance", json=payload)
    assert r.status_code == 200
    assert r.json()["data"]["balance"] == 12_345

    body = client.get("/api/daily-balance", params={"user_id": demo_user.id, "days": 3}).json()
    assert body["count"] == 1
    assert body["data"][0]["balance"] == 12_345


def test_last_microseconds_of_day_belong_to_that_day(client, db_session, demo_user, make_txn):
    # KST 2025-01-31 23:59:59.9995
    make_txn(1_000, occurred_at="2025-01-31T14:59:59.999500Z")

    row = db_session.query(models.DailyBalance).filter(models.DailyBalance.day == date(2025, 1, 31)).one()
    assert row.expense == 1_000

    series = client.get("/api/daily-balance", params={"user_id": demo_user.id, "year": 2025, "month": 1}).json()["data"]
    assert series[-1]["expense"] == 1_000
    assert series[-1]["balance"] == -1_000
