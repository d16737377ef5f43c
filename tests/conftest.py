import smtplib

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import mailer
import main


class FakeSMTP:
    """Stand-in for smtplib.SMTP that records messages instead of sending them."""

    sent = []
    fail = False

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def send_message(self, msg):
        if FakeSMTP.fail:
            raise smtplib.SMTPRecipientsRefused({msg["To"]: (550, b"mailbox unavailable")})
        FakeSMTP.sent.append(msg)


@pytest.fixture
def db(monkeypatch):
    mock_db = mongomock.MongoClient()["checkout_test"]
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest.fixture
def smtp(monkeypatch):
    monkeypatch.setenv("SMTP_HOST", "smtp.test")
    monkeypatch.delenv("SMTP_USER", raising=False)
    monkeypatch.setattr(FakeSMTP, "sent", [])
    monkeypatch.setattr(FakeSMTP, "fail", False)
    monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


@pytest.fixture
def product_id(db):
    result = db["product"].insert_one({
        "title": "Converse Chuck Taylor All Star II Hi",
        "description": "Classic high-top sneakers with modern comfort.",
        "price": 65.0,
        "image_url": "https://images.example.com/chuck.jpg",
        "inventory": 2,
        "variants": ["Black/White", "Red/White", "All Black"],
    })
    return str(result.inserted_id)


@pytest.fixture
def customer_data():
    return {
        "fullName": "  Jane Doe ",
        "email": " Jane.Doe@Example.COM ",
        "phone": "+1 (555) 123-4567",
        "address": "12 Main St ",
        "city": "Springfield",
        "state": "IL",
        "zipCode": " 62701",
    }


@pytest.fixture
def payment_data():
    return {"cardNumber": "4242 4242 4242 4242", "expiry": "12/99", "cvv": "123"}


@pytest.fixture
def order_payload(product_id, customer_data):
    def make(**overrides):
        payload = {
            "customerData": customer_data,
            "productId": product_id,
            "variant": "Black/White",
            "quantity": 1,
            "transactionType": "1",
        }
        payload.update(overrides)
        return payload
    return make


@pytest.fixture
def client(db, smtp):
    return TestClient(main.app)
