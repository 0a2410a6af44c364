# bookstore/services/payment_service.py
import logging
from datetime import datetime, timezone

from sqlmodel import Session

from bookstore.core.errors import (
    AlreadyConfirmedError,
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    PaymentNotPendingError,
)
from bookstore.database import unit_of_work
from bookstore.models.order import Order
from bookstore.models.status import (
    STOCK_COMMITTED,
    OrderStatus,
    PaymentStatus,
    can_transition,
)
from bookstore.repositories.book_repo import BookRepository
from bookstore.repositories.order_repo import OrderRepository
from bookstore.repositories.payment_repo import PaymentRepository
from bookstore.schemas.order import ConfirmPaymentResult
from bookstore.services.status_guard import ensure_consistent

logger = logging.getLogger(__name__)

# Orders whose stock has not been taken yet.
_AWAITING_STOCK = frozenset({OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT})


class PaymentService:
    """
    Moves a Pending payment to Completed/Failed and keeps its order in step.

    Success:
      - Banking (order awaiting_payment): take stock for every detail,
        order -> confirmed. Any line that would go negative aborts the
        whole confirmation.
      - COD (order already confirmed, stock already taken): payment only.
    Failure:
      - order -> cancelled; stock already taken (COD) is returned.
    """

    def __init__(
        self,
        payment_repo: PaymentRepository,
        order_repo: OrderRepository,
        book_repo: BookRepository,
    ):
        self.payment_repo = payment_repo
        self.order_repo = order_repo
        self.book_repo = book_repo

    def confirm_payment(
        self,
        session: Session,
        payment_id: int,
        is_success: bool,
        transaction_id: str | None = None,
    ) -> ConfirmPaymentResult:
        with unit_of_work(session, "Failed to confirm payment"):
            # Same lock order as cancellation: order first, then payment.
            unlocked = self.payment_repo.get_by_id(session, payment_id)
            if unlocked is None:
                raise NotFoundError("Payment not found")

            order = self.order_repo.get_for_update(session, unlocked.order_id)
            if order is None:
                raise NotFoundError("Order not found")
            payment = self.payment_repo.get_for_update(session, payment_id)

            current = PaymentStatus(payment.payment_status)
            if current is PaymentStatus.COMPLETED:
                raise AlreadyConfirmedError(payment.id)
            if current is not PaymentStatus.PENDING:
                raise PaymentNotPendingError(payment.id, current.value)

            order_status = OrderStatus(order.status)

            payment.payment_status = (
                PaymentStatus.COMPLETED.value if is_success else PaymentStatus.FAILED.value
            )
            payment.transaction_id = transaction_id
            payment.updated_at = datetime.now(timezone.utc)
            self.payment_repo.update(session, payment)

            if is_success:
                if order_status in _AWAITING_STOCK:
                    self._take_stock(session, order)
                    order.status = OrderStatus.CONFIRMED.value
                elif order_status not in STOCK_COMMITTED:
                    raise InvalidTransitionError(order_status.value, OrderStatus.CONFIRMED.value)
            else:
                if not can_transition(order_status, OrderStatus.CANCELLED):
                    raise InvalidTransitionError(order_status.value, OrderStatus.CANCELLED.value)
                if order_status in STOCK_COMMITTED:
                    self._return_stock(session, order)
                order.status = OrderStatus.CANCELLED.value
            self.order_repo.update_order(session, order)
            ensure_consistent(order, self.payment_repo.list_for_order(session, order.id))

            result = ConfirmPaymentResult(
                order_id=order.id,
                payment_id=payment.id,
                payment_status=payment.payment_status,
                order_status=order.status,
            )

        logger.info(
            "Payment %s confirmed success=%s: payment=%s order %s=%s",
            payment_id,
            is_success,
            result.payment_status,
            result.order_id,
            result.order_status,
        )
        return result

    # -------- Stock helpers --------

    def _take_stock(self, session: Session, order: Order) -> None:
        details = self.order_repo.list_details(session, order.id)
        books = self.book_repo.get_many_for_update(session, (d.book_id for d in details))
        for detail in details:
            book = books.get(detail.book_id)
            if book is None:
                raise NotFoundError(f"Book {detail.book_id} not found")
            if book.quantity - detail.quantity < 0:
                raise InsufficientStockError(book.title, book.quantity)
            self.book_repo.adjust_stock(session, book, -detail.quantity)

    def _return_stock(self, session: Session, order: Order) -> None:
        details = self.order_repo.list_details(session, order.id)
        books = self.book_repo.get_many_for_update(session, (d.book_id for d in details))
        for detail in details:
            book = books.get(detail.book_id)
            if book is not None:
                self.book_repo.adjust_stock(session, book, detail.quantity)
