from datetime import datetime

from bson.objectid import ObjectId
from fastapi.testclient import TestClient

import database
import main


def test_root(client):
    assert client.get("/").json() == {"message": "Checkout API is running"}


def test_health_reports_database(client):
    assert client.get("/health").json()["database"] == "connected"


def test_submit_and_fetch_order(client, db, order_payload, product_id):
    response = client.post("/api/orders", json=order_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "APPROVED"
    assert body["message"] == "Order placed successfully"
    order_number = body["orderNumber"]

    response = client.get(f"/api/orders/{order_number}")
    assert response.status_code == 200
    order = response.json()["order"]
    assert order["orderNumber"] == order_number
    assert order["status"] == "APPROVED"
    assert order["variant"] == "Black/White"
    assert order["productId"] == product_id
    assert order["customer"]["fullName"] == "Jane Doe"
    assert order["customer"]["zipCode"] == "62701"
    assert order["product"]["price"] == 65.0
    assert order["product"]["inventory"] == 1
    assert order["product"]["title"] == "Converse Chuck Taylor All Star II Hi"


def test_submit_with_payment_data(client, order_payload, payment_data):
    response = client.post("/api/orders", json=order_payload(paymentData=payment_data, transactionType="3"))
    assert response.status_code == 200
    assert response.json()["status"] == "ERROR"


def test_validation_errors_return_400(client, db, order_payload, customer_data):
    customer_data["email"] = "jane"
    response = client.post("/api/orders", json=order_payload(
        paymentData={"cardNumber": "4242424242424242", "expiry": "01/20", "cvv": "123"},
    ))

    assert response.status_code == 400
    assert response.json() == {"errors": [
        "Valid email is required",
        "Valid future expiry date is required (MM/YY)",
    ]}
    assert db["order"].count_documents({}) == 0


def test_missing_customer_data_lists_every_field(client, order_payload):
    response = client.post("/api/orders", json=order_payload(customerData={}))
    assert response.status_code == 400
    assert len(response.json()["errors"]) == 7


def test_unknown_product_returns_404(client, order_payload):
    response = client.post("/api/orders", json=order_payload(productId=str(ObjectId())))
    assert response.status_code == 404
    assert response.json() == {"detail": "Product not found"}


def test_insufficient_inventory_returns_400(client, order_payload):
    response = client.post("/api/orders", json=order_payload(quantity=5))
    assert response.status_code == 400
    assert response.json() == {"detail": "Insufficient inventory"}


def test_unknown_order_returns_404(client):
    response = client.get("/api/orders/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"detail": "Order not found"}


def test_email_failure_does_not_change_response(client, smtp, order_payload):
    smtp.fail = True
    response = client.post("/api/orders", json=order_payload())
    assert response.status_code == 200
    assert response.json()["status"] == "APPROVED"


def test_email_sent_after_response(client, smtp, order_payload):
    response = client.post("/api/orders", json=order_payload(transactionType="2"))
    assert len(smtp.sent) == 1
    assert response.json()["orderNumber"] in smtp.sent[0]["Subject"]


def test_database_unavailable_returns_500(smtp, order_payload, monkeypatch):
    monkeypatch.setattr(database, "db", None)
    response = TestClient(main.app).post("/api/orders", json=order_payload())
    assert response.status_code == 500
    assert response.json() == {"detail": "Database not available"}


def test_product_catalog(client, product_id):
    products = client.get("/api/products").json()
    assert [p["id"] for p in products] == [product_id]
    assert products[0]["variants"] == ["Black/White", "Red/White", "All Black"]
    assert products[0]["imageUrl"] == "https://images.example.com/chuck.jpg"

    assert client.get("/api/products", params={"q": "chuck"}).json()[0]["id"] == product_id
    assert client.get("/api/products", params={"q": "nike"}).json() == []

    assert client.get(f"/api/products/{product_id}").json()["inventory"] == 2
    assert client.get(f"/api/products/{ObjectId()}").status_code == 404


def test_create_product(client, db):
    response = client.post("/api/products", json={
        "title": "Adidas Ultraboost 22",
        "price": 180.0,
        "imageUrl": "https://images.example.com/ultraboost.jpg",
        "inventory": 25,
        "variants": ["Core Black", "Cloud White"],
    })

    assert response.status_code == 201
    stored = db["product"].find_one({"_id": ObjectId(response.json()["id"])})
    assert stored["image_url"] == "https://images.example.com/ultraboost.jpg"
    assert stored["inventory"] == 25


def test_create_product_rejects_negative_inventory(client):
    response = client.post("/api/products", json={"title": "Broken", "price": 1.0, "inventory": -1})
    assert response.status_code == 422


def test_startup_creates_order_number_index(db, smtp):
    with TestClient(main.app):
        pass
    assert any(
        index["key"] == [("order_number", 1)] and index.get("unique")
        for index in db["order"].index_information().values()
    )


def test_missing_quantity_returns_400(client, order_payload):
    payload = order_payload()
    del payload["quantity"]

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 400
    assert response.json() == {"errors": ["Quantity must be at least 1"]}


def test_order_created_at_carries_timezone(client, order_payload):
    order_number = client.post("/api/orders", json=order_payload()).json()["orderNumber"]

    created_at = client.get(f"/api/orders/{order_number}").json()["order"]["createdAt"]

    assert datetime.fromisoformat(created_at.replace("Z", "+00:00")).tzinfo is not None
