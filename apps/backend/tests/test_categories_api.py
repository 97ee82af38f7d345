from __future__ import annotations

from gagyebu import models


def test_seed_default_categories(client, demo_user):
    r = client.post("/api/categories/seed", json={"user_id": demo_user.id})
    assert r.status_code == 201, r.text
    rows = r.json()["data"]
    assert len(rows) == 13
    assert sum(1 for c in rows if c["type"] == "EXPENSE") == 9
    assert sum(1 for c in rows if c["type"] == "INCOME") == 4

    again = client.post("/api/categories/seed", json={"user_id": demo_user.id})
    assert again.status_code == 409
    assert again.json() == {"error": "이미 카테고리가 존재합니다"}


def test_list_filters_by_type(client, demo_user, make_category):
    make_category("식비")
    make_category("급여", "INCOME")

    body = client.get("/api/categories", params={"user_id": demo_user.id}).json()
    assert body["count"] == 2
    income = client.get("/api/categories", params={"user_id": demo_user.id, "type": "INCOME"}).json()
    assert [c["name"] for c in income["data"]] == ["급여"]


def test_create_defaults_and_duplicates(client, demo_user, make_category):
    cat = make_category("간식")
    assert cat["color"] == "#6366F1"
    assert cat["icon"] == "💰"

    dup = client.post("/api/categories", json={"user_id": demo_user.id, "name": "간식", "type": "EXPENSE"})
    assert dup.status_code == 409
    assert dup.json() == {"error": "이미 존재하는 카테고리입니다"}

    # 같은 이름이라도 타입이 다르면 허용
    make_category("간식", "INCOME")


def test_income_category_has_no_default_budget(client, demo_user, make_category):
    cat = make_category("부수입", "INCOME", default_budget=10_000)
    assert cat["default_budget"] is None


def test_recreate_restores_deleted_category(client, db_session, demo_user, make_category):
    cat = make_category("구독", color="#000000")
    r = client.delete(f"/api/categories/{cat['id']}", params={"user_id": demo_user.id})
    assert r.status_code == 200
    assert client.get("/api/categories", params={"user_id": demo_user.id}).json()["count"] == 0

    restored = make_category("구독")
    assert restored["id"] == cat["id"]
    assert restored["color"] == "#6366F1"
    assert db_session.query(models.Category).count() == 1


def test_update_category(client, demo_user, make_category):
    cat = make_category("식비", default_budget=100_000)
    make_category("외식")

    r = client.patch(f"/api/categories/{cat['id']}", json={"user_id": demo_user.id, "icon": "🍚"})
    assert r.status_code == 200
    assert r.json()["data"]["icon"] == "🍚"
    assert r.json()["data"]["default_budget"] == 100_000

    r = client.patch(f"/api/categories/{cat['id']}", json={"user_id": demo_user.id, "name": "외식"})
    assert r.status_code == 409

    r = client.patch(f"/api/categories/{cat['id']}", json={"user_id": demo_user.id, "default_budget": None})
    assert r.json()["data"]["default_budget"] is None


def test_type_change_blocked_while_in_use(client, demo_user, make_category, make_txn):
    cat = make_category("기타")
    make_txn(1_000, category_id=cat["id"])

    r = client.patch(f"/api/categories/{cat['id']}", json={"user_id": demo_user.id, "type": "INCOME"})
    assert r.status_code == 409
    assert r.json() == {"error": "Category is used by transactions of another type"}


def test_type_change_blocked_while_budgeted(client, demo_user, make_category):
    cat = make_category("식비")
    r = client.post(
        "/api/budgets",
        json={"user_id": demo_user.id, "category_id": cat["id"], "amount": 100_000, "year": 2025, "month": 3},
    )
    assert r.status_code == 200

    r = client.patch(f"/api/categories/{cat['id']}", json={"user_id": demo_user.id, "type": "INCOME"})
    assert r.status_code == 409
    assert r.json() == {"error": "Category is used by budgets of another type"}

    budgets = client.get("/api/budgets", params={"user_id": demo_user.id}).json()["data"]
    assert [b["category"]["type"] for b in budgets] == ["EXPENSE"]

    # 예산을 지우면 타입 변경 가능
    client.delete("/api/budgets", params={"user_id": demo_user.id, "year": 2025, "month": 3, "category_id": cat["id"]})
    r = client.patch(f"/api/categories/{cat['id']}", json={"user_id": demo_user.id, "type": "INCOME"})
    assert r.status_code == 200


def test_type_change_clears_default_budget(client, demo_user, make_category):
    cat = make_category("기타", default_budget=5_000)
    r = client.patch(f"/api/categories/{cat['id']}", json={"user_id": demo_user.id, "type": "INCOME"})
    assert r.status_code == 200
    assert r.json()["data"]["type"] == "INCOME"
    assert r.json()["data"]["default_budget"] is None


def test_category_not_found(client, demo_user):
    r = client.patch("/api/categories/999", json={"user_id": demo_user.id, "name": "x"})
    assert r.status_code == 404
    assert r.json() == {"error": "Category not found"}
    r = client.delete("/api/categories/999", params={"user_id": demo_user.id})
    assert r.status_code == 404
