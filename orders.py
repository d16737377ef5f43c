"""
Order submission and lookup.

submit_order runs the whole checkout in one call: validate, check stock,
derive the simulated payment outcome, reserve inventory, persist the customer
and the order, then hand the confirmation email off to a background task.
"""

import logging
import uuid
from typing import Optional, Tuple

from fastapi import BackgroundTasks

import database
import mailer
from errors import InsufficientInventoryError, NotFoundError, ValidationError
from schemas import (
    Customer,
    CustomerData,
    CustomerView,
    Order,
    OrderReceipt,
    OrderRequest,
    OrderStatus,
    OrderView,
    ProductView,
)
from validators import validate_customer, validate_quantity

log = logging.getLogger(__name__)

TRANSACTION_STATUS = {
    "1": OrderStatus.APPROVED,
    "2": OrderStatus.DECLINED,
    "3": OrderStatus.ERROR,
}


def status_for_transaction(code: Optional[str]) -> OrderStatus:
    """Map the simulated transaction code; unknown or missing codes decline."""
    return TRANSACTION_STATUS.get(code, OrderStatus.DECLINED)


def new_order_number() -> str:
    return str(uuid.uuid4())


def normalize_customer(data: CustomerData) -> Customer:
    def clean(value):
        return (value or "").strip()

    return Customer(
        full_name=clean(data.full_name),
        email=clean(data.email).lower(),
        phone=clean(data.phone),
        address=clean(data.address),
        city=clean(data.city),
        state=clean(data.state),
        zip_code=clean(data.zip_code),
    )


# -------------
# Notifications
# -------------

def render_notification(order_number: str, status: str, customer: Customer, product: dict,
                        variant: Optional[str], quantity: int) -> Tuple[str, str]:
    """Build (subject, body) for the confirmation or failure email."""
    title = product.get("title", "")
    price = float(product.get("price", 0))
    total = price * quantity
    details = (
        f"Order Number: {order_number}\n"
        f"Product: {title}\n"
        f"Variant: {variant or '-'}\n"
        f"Quantity: {quantity}\n"
        f"Unit Price: ${price:.2f}\n"
        f"Total Amount: ${total:.2f}\n"
    )

    if status == OrderStatus.APPROVED:
        subject = f"Order Confirmed: {order_number}"
        body = (
            f"Thank you for your purchase, {customer.full_name}!\n\n"
            "Your order has been successfully processed and confirmed.\n\n"
            f"{details}\n"
            "Shipping Address:\n"
            f"{customer.address}\n"
            f"{customer.city}, {customer.state} {customer.zip_code}\n\n"
            "We'll send you another email with tracking information once your order ships.\n"
        )
    else:
        subject = f"Order Payment Failed: {order_number}"
        body = (
            f"Hello {customer.full_name},\n\n"
            f"Unfortunately, we were unable to process your payment for order {order_number}.\n\n"
            f"{details}\n"
            "Please check your payment information and try placing the order again.\n"
            "If the issue persists, contact support@shop.com.\n"
        )
    return subject, body


def notify_customer(order_number: str, status: str, customer: Customer, product: dict,
                    variant: Optional[str], quantity: int) -> None:
    """Render and send the order email; failures are logged and never re-raised."""
    try:
        subject, body = render_notification(order_number, status, customer, product, variant, quantity)
        mailer.send_mail(customer.email, subject, body)
    except Exception:
        log.exception("Failed to send order email for %s to %s", order_number, customer.email)


# ----------
# Submission
# ----------

def _rollback(order_number: str, customer_id: Optional[str], product_key, reserved_qty: int) -> None:
    if customer_id is not None:
        try:
            database.delete_document("customer", customer_id)
        except Exception:
            log.exception("Rollback of order %s: could not delete customer %s", order_number, customer_id)
    if reserved_qty:
        try:
            database.increment_inventory(product_key, reserved_qty)
        except Exception:
            log.exception("Rollback of order %s: could not restore %d units", order_number, reserved_qty)


def submit_order(request: OrderRequest, background_tasks: Optional[BackgroundTasks] = None) -> OrderReceipt:
    errors = validate_customer(request.customer_data, request.payment_data)
    errors += validate_quantity(request.quantity)
    if errors:
        raise ValidationError(errors)

    product = database.find_product(request.product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if request.quantity > product.get("inventory", 0):
        raise InsufficientInventoryError("Insufficient inventory")

    status = status_for_transaction(request.transaction_type)
    order_number = new_order_number()
    customer = normalize_customer(request.customer_data)
    product_key = product["_id"]

    # Reserve before any write: a lost race must leave no rows behind
    reserved_qty = 0
    if status == OrderStatus.APPROVED:
        if database.decrement_inventory(product_key, request.quantity) is None:
            log.warning("Order %s lost the inventory race for product %s", order_number, product_key)
            raise InsufficientInventoryError("Insufficient inventory")
        reserved_qty = request.quantity

    customer_id = None
    try:
        customer_id = database.create_document("customer", customer)
        order = Order(
            order_number=order_number,
            status=status,
            product_id=str(product_key),
            variant=request.variant,
            quantity=request.quantity,
            customer_id=customer_id,
        )
        database.create_document("order", order)
    except Exception:
        log.exception("Order %s could not be persisted; rolling back", order_number)
        _rollback(order_number, customer_id, product_key, reserved_qty)
        raise

    log.info("Order %s stored with status %s", order_number, status.value)

    notification = (order_number, status, customer, product, request.variant, request.quantity)
    if background_tasks is not None:
        background_tasks.add_task(notify_customer, *notification)
    else:
        notify_customer(*notification)

    message = "Order placed successfully" if status == OrderStatus.APPROVED else "Transaction failed"
    return OrderReceipt(order_number=order_number, status=status, message=message)


# ------
# Lookup
# ------

def get_order(order_number: str) -> OrderView:
    order = database.get_document("order", {"order_number": order_number})
    if order is None:
        raise NotFoundError("Order not found")

    customer_oid = database.to_object_id(order.get("customer_id"))
    customer = database.get_document("customer", {"_id": customer_oid}) if customer_oid is not None else None
    if customer is None:
        raise NotFoundError(f"Customer for order {order_number} not found")

    product = database.find_product(order["product_id"])

    view = database.to_str_id(order)
    view["customer"] = CustomerView.model_validate(database.to_str_id(customer))
    view["product"] = ProductView.model_validate(database.to_str_id(product)) if product else None
    return OrderView.model_validate(view)
