# bookstore/routers/orders.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from bookstore.core.auth import AuthenticatedPrincipal, get_token_principal, resolve_principal
from bookstore.database import get_session
from bookstore.repositories.book_repo import BookRepository
from bookstore.repositories.cart_repo import CartRepository
from bookstore.repositories.order_repo import OrderRepository
from bookstore.repositories.payment_repo import PaymentRepository
from bookstore.repositories.user_repo import UserRepository
from bookstore.schemas.common import ApiResponse
from bookstore.schemas.order import (
    CheckoutRequest,
    CheckoutResult,
    ConfirmPaymentRequest,
    ConfirmPaymentResult,
    OrderRead,
    OrderStatusResult,
    OrderStatusUpdate,
    OrderSummary,
)
from bookstore.services.checkout_service import CheckoutService
from bookstore.services.order_service import OrderService
from bookstore.services.payment_service import PaymentService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
book_repo = BookRepository()
payment_repo = PaymentRepository()

checkout_service = CheckoutService(cart_repo, book_repo, order_repo, payment_repo)
payment_service = PaymentService(payment_repo, order_repo, book_repo)
service = OrderService(order_repo, payment_repo, book_repo, UserRepository())


# -------- Checkout / payment --------


@router.post("/checkout", response_model=ApiResponse[CheckoutResult])
def checkout(
    payload: CheckoutRequest,
    session: Session = Depends(get_session),
    token_principal: AuthenticatedPrincipal | None = Depends(get_token_principal),
):
    """
    Create an order and its payment from the user's cart.

    - COD: order confirmed, stock taken now.
    - Banking: order awaiting_payment, stock taken on confirmation,
      `qrCodeUrl` carries the transfer payload.
    """
    principal = resolve_principal(session, payload.user_id, token_principal)
    result = checkout_service.checkout(session, principal, payload.payment_method)
    return ApiResponse[CheckoutResult](message="Order placed successfully", data=result)


@router.post("/confirm-payment", response_model=ApiResponse[ConfirmPaymentResult])
def confirm_payment(
    payload: ConfirmPaymentRequest,
    session: Session = Depends(get_session),
):
    """
    Confirm a pending payment (bank transfer reconciliation or COD
    collection). A payment can be confirmed successfully only once.
    """
    result = payment_service.confirm_payment(
        session,
        payload.payment_id,
        payload.is_success,
        payload.transaction_id,
    )
    message = (
        "Payment confirmed successfully"
        if payload.is_success
        else "Payment marked as failed"
    )
    return ApiResponse[ConfirmPaymentResult](message=message, data=result)


# -------- Reads --------


@router.get("/user/{user_id}", response_model=ApiResponse[list[OrderSummary]])
def list_user_orders(
    user_id: int,
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List a user's orders (newest first) with item counts and latest payment.
    """
    return ApiResponse[list[OrderSummary]](
        data=service.list_user_orders(session, user_id, skip, limit)
    )


@router.get("/{order_id}", response_model=ApiResponse[OrderRead])
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
):
    """
    Get a single order with details and payments.
    """
    return ApiResponse[OrderRead](data=service.get_order(session, order_id))


# -------- Status changes --------


@router.put("/{order_id}/status", response_model=ApiResponse[OrderStatusResult])
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status through the transition table.

      pending          -> cancelled

      awaiting_payment -> cancelled

      confirmed        -> shipping, cancelled (stock returned)

      shipping         -> delivered (COD payment completed)

      delivered        -> refunded

    """
    result = service.update_status(session, order_id, payload.status)
    return ApiResponse[OrderStatusResult](message="Order status updated", data=result)


@router.delete("/{order_id}", response_model=ApiResponse[OrderStatusResult])
def cancel_order(
    order_id: int,
    session: Session = Depends(get_session),
):
    """
    Cancel an order that is still pending or awaiting payment.
    """
    result = service.cancel_order(session, order_id)
    return ApiResponse[OrderStatusResult](message="Order cancelled", data=result)
