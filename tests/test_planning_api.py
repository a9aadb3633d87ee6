"""
HTTP tests for task and budget routes
"""

from app.core.config import settings

AUTH = {"Authorization": f"Bearer {settings.ADMIN_TOKEN}"}

def create_task(client, title, category="Venue", **extra):
    response = client.post("/tasks", json={"title": title, "category": category, **extra}, headers=AUTH)
    assert response.status_code == 201
    return response.json()["data"]

def create_expense(client, title, amount, category="Venue", **extra):
    response = client.post(
        "/budget/expenses",
        json={"title": title, "amount": amount, "category": category, **extra},
        headers=AUTH
    )
    assert response.status_code == 201
    return response.json()["data"]

def test_requires_admin_token(client):
    assert client.get("/tasks", headers={"Authorization": "Bearer wrong"}).status_code == 401
    assert client.get("/budget", headers={"Authorization": "Bearer wrong"}).status_code == 401

def test_task_checklist_flow(client):
    venue = create_task(client, "Book the venue", is_priority=True)
    create_task(client, "Choose music", category="Music")

    response = client.post(f"/tasks/{venue['id']}/toggle", headers=AUTH)
    assert response.json()["data"]["completed"] is True

    open_tasks = client.get("/tasks", params={"completed": "false"}, headers=AUTH).json()["data"]["tasks"]
    assert [t["title"] for t in open_tasks] == ["Choose music"]

    progress = client.get("/tasks/progress", headers=AUTH).json()["data"]
    assert progress["total"] == 2
    assert progress["completed"] == 1
    assert progress["open_priority"] == 0

def test_task_update_and_delete(client):
    task = create_task(client, "Cake tasting")

    response = client.patch(f"/tasks/{task['id']}", json={"category": "Food"}, headers=AUTH)
    assert response.json()["data"]["category"] == "Food"

    assert client.delete(f"/tasks/{task['id']}", headers=AUTH).status_code == 200
    response = client.get(f"/tasks/{task['id']}", headers=AUTH)
    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"

def test_task_validation(client):
    response = client.post("/tasks", json={"title": "x" * 141, "category": "Venue"}, headers=AUTH)
    assert response.status_code == 422

def test_rename_task_category(client):
    create_task(client, "Band", category="Music")

    response = client.post("/tasks/categories/rename", json={"old_name": "Music", "new_name": "Party"}, headers=AUTH)

    assert response.json()["data"]["updated_count"] == 1
    tasks = client.get("/tasks", params={"category": "Party"}, headers=AUTH).json()["data"]["tasks"]
    assert [t["title"] for t in tasks] == ["Band"]

def test_budget_flow(client):
    response = client.put("/budget", json={"total_budget": 40000}, headers=AUTH)
    assert response.json()["data"]["total_budget"] == 40000

    hall = create_expense(client, "Hall", 10000)
    create_expense(client, "Band", 5000, category="Music")

    response = client.post(f"/budget/expenses/{hall['id']}/mark-paid", headers=AUTH)
    assert response.json()["data"]["payment_status"] == "paid"

    summary = client.get("/budget", headers=AUTH).json()["data"]
    assert summary["total_budget"] == 40000
    assert summary["spent"] == 10000
    assert summary["remaining"] == 30000
    assert summary["spent_pct"] == 25.0
    assert summary["unpaid_amount"] == 5000

    unpaid = client.get("/budget/expenses", params={"payment_status": "none"}, headers=AUTH).json()["data"]["expenses"]
    assert [e["title"] for e in unpaid] == ["Band"]

def test_unpriced_expense_cannot_be_paid(client):
    expense = create_expense(client, "Flowers", 0)

    response = client.post(f"/budget/expenses/{expense['id']}/toggle-payment", headers=AUTH)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "AMOUNT_REQUIRED"

def test_negative_budget_rejected(client):
    assert client.put("/budget", json={"total_budget": -5}, headers=AUTH).status_code == 422

def test_expense_update_and_delete(client):
    expense = create_expense(client, "Photographer", 3000, category="Media")

    response = client.patch(f"/budget/expenses/{expense['id']}", json={"amount": 3500, "is_deposit": True}, headers=AUTH)
    data = response.json()["data"]
    assert data["amount"] == 3500
    assert data["is_deposit"] is True

    assert client.delete(f"/budget/expenses/{expense['id']}", headers=AUTH).status_code == 200
    assert client.get(f"/budget/expenses/{expense['id']}", headers=AUTH).status_code == 404

def test_rename_expense_category(client):
    create_expense(client, "DJ", 1500, category="Music")

    response = client.post("/budget/categories/rename", json={"old_name": "Music", "new_name": "Party"}, headers=AUTH)

    assert response.json()["data"]["updated_count"] == 1
    summary = client.get("/budget", headers=AUTH).json()["data"]
    assert [c["category"] for c in summary["categories"]] == ["Party"]
