# bookstore/services/order_service.py
import logging
from datetime import datetime, timezone

from sqlmodel import Session

from bookstore.core.errors import (
    InvalidPaymentMethodError,
    InvalidStatusError,
    InvalidTransitionError,
    NotCancellableError,
    NotFoundError,
)
from bookstore.database import unit_of_work
from bookstore.models.order import Order, Payment
from bookstore.models.status import (
    CUSTOMER_CANCELLABLE,
    STOCK_COMMITTED,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    can_transition,
)
from bookstore.repositories.book_repo import BookRepository
from bookstore.repositories.order_repo import OrderRepository
from bookstore.repositories.payment_repo import PaymentRepository
from bookstore.repositories.user_repo import UserRepository
from bookstore.schemas.order import (
    AdminOrderRead,
    AdminPaymentRead,
    CustomerInfo,
    OrderDetailRead,
    OrderRead,
    OrderStatusResult,
    OrderSummary,
    PaymentRead,
    PaymentOrderInfo,
    PaymentSummary,
)
from bookstore.services.status_guard import ensure_consistent

logger = logging.getLogger(__name__)


class OrderService:
    """
    Business logic for orders after checkout.

    Responsibilities:
      - Order reads (single order, per user, admin listing)
      - Customer cancellation (pending / awaiting_payment only)
      - Admin status changes through the transition table
      - Keep payments consistent with the order status
      - Admin payment lookups

    Lock order: order row first, then its payments, then books.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        payment_repo: PaymentRepository,
        book_repo: BookRepository,
        user_repo: UserRepository,
    ):
        self.order_repo = order_repo
        self.payment_repo = payment_repo
        self.book_repo = book_repo
        self.user_repo = user_repo

    # -------- Reads --------

    def get_order(self, session: Session, order_id: int) -> OrderRead:
        """
        Get a single order with details and payments.

        - 404 if order not found.
        """
        return self._read_order(session, self._get_existing(session, order_id))

    def get_admin_order(self, session: Session, order_id: int) -> AdminOrderRead:
        """
        Admin view of a single order, with the customer who placed it.
        """
        order = self._get_existing(session, order_id)
        return AdminOrderRead(
            **self._read_order(session, order).model_dump(),
            customer=self._customer(session, order.user_id),
        )

    def _get_existing(self, session: Session, order_id: int) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _read_order(self, session: Session, order: Order) -> OrderRead:
        payments = self.payment_repo.list_for_order(session, order.id)

        return OrderRead(
            order_id=order.id,
            user_id=order.user_id,
            total_price=float(order.total_price),
            status=order.status,
            created_at=order.created_at,
            order_details=self._detail_reads(session, order.id),
            payments=[
                PaymentRead(
                    payment_id=p.id,
                    amount=float(p.amount),
                    payment_method=p.payment_method,
                    payment_status=p.payment_status,
                    transaction_id=p.transaction_id,
                    created_at=p.created_at,
                    updated_at=p.updated_at,
                )
                for p in payments
            ],
        )

    def list_user_orders(
        self,
        session: Session,
        user_id: int,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderSummary]:
        """
        List orders for the given user, newest first.
        """
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        return [self._summarize(session, o) for o in orders]

    def list_all_orders(
        self,
        session: Session,
        status: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderSummary]:
        """
        List all orders, optionally filtered by status (admin).
        """
        status_value: str | None = None
        if status:
            parsed = OrderStatus.parse(status)
            if parsed is None:
                raise InvalidStatusError(f"Invalid order status '{status}'")
            status_value = parsed.value

        orders = self.order_repo.list_all(session, skip, limit, status=status_value)
        return [self._summarize(session, o) for o in orders]

    # -------- Customer cancellation --------

    def cancel_order(self, session: Session, order_id: int) -> OrderStatusResult:
        """
        Cancel an order that has not committed stock yet.

        Allowed only from pending / awaiting_payment; every payment of the
        order becomes Cancelled in the same transaction.
        """
        with unit_of_work(session, "Failed to cancel order"):
            order = self.order_repo.get_for_update(session, order_id)
            if not order:
                raise NotFoundError("Order not found")

            current = OrderStatus(order.status)
            if current not in CUSTOMER_CANCELLABLE:
                raise NotCancellableError(order.id, current.value)

            payments = self.payment_repo.list_for_order_for_update(session, order.id)
            self._cancel(session, order, payments, restock=False)
            ensure_consistent(order, payments)
            result = OrderStatusResult(order_id=order.id, status=order.status)

        logger.info("Order %s cancelled by customer (was %s)", order_id, current.value)
        return result

    # -------- Admin status changes --------

    def update_status(
        self,
        session: Session,
        order_id: int,
        new_status: str,
    ) -> OrderStatusResult:
        """
        Admin-only status update through the transition table
        (bookstore.models.status.ORDER_TRANSITIONS).

          - Values outside OrderStatus -> 400 invalid_status.
          - Transitions not in the table -> 400 invalid_transition.
          - confirmed -> cancelled returns the order's stock.
          - delivered completes any pending COD payment.
        """
        new = OrderStatus.parse(new_status)
        if new is None:
            raise InvalidStatusError(f"Invalid order status '{new_status}'")

        with unit_of_work(session, "Failed to update order status"):
            order = self.order_repo.get_for_update(session, order_id)
            if not order:
                raise NotFoundError("Order not found")

            current = OrderStatus(order.status)
            if current is not new:
                if not can_transition(current, new):
                    raise InvalidTransitionError(current.value, new.value)

                payments = self.payment_repo.list_for_order_for_update(session, order.id)
                if new is OrderStatus.CANCELLED:
                    self._cancel(
                        session, order, payments, restock=current in STOCK_COMMITTED
                    )
                else:
                    order.status = new.value
                    self.order_repo.update_order(session, order)
                    if new is OrderStatus.DELIVERED:
                        self._complete_cod_payments(session, payments)
                ensure_consistent(order, payments)

            result = OrderStatusResult(order_id=order.id, status=order.status)

        logger.info("Order %s status %s -> %s", order_id, current.value, result.status)
        return result

    # -------- Admin payment lookups --------

    def list_payments(
        self,
        session: Session,
        status: str | None = None,
        payment_method: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[AdminPaymentRead]:
        """
        List payments newest first, optionally filtered by status and
        method (both case-insensitive).
        """
        status_value: str | None = None
        if status:
            parsed_status = PaymentStatus.parse(status)
            if parsed_status is None:
                raise InvalidStatusError(f"Invalid payment status '{status}'")
            status_value = parsed_status.value

        method_value: str | None = None
        if payment_method:
            parsed_method = PaymentMethod.parse(payment_method)
            if parsed_method is None:
                raise InvalidPaymentMethodError(payment_method)
            method_value = parsed_method.value

        payments = self.payment_repo.list_all(
            session, skip, limit, status=status_value, method=method_value
        )
        return [self._read_payment(session, p, with_details=False) for p in payments]

    def get_payment(self, session: Session, payment_id: int) -> AdminPaymentRead:
        """
        Single payment with its order lines and customer.

        - 404 if payment not found.
        """
        payment = self.payment_repo.get_by_id(session, payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        return self._read_payment(session, payment, with_details=True)

    # -------- Helpers --------

    def _cancel(
        self,
        session: Session,
        order: Order,
        payments: list[Payment],
        restock: bool,
    ) -> None:
        now = datetime.now(timezone.utc)

        order.status = OrderStatus.CANCELLED.value
        self.order_repo.update_order(session, order)

        for payment in payments:
            payment.payment_status = PaymentStatus.CANCELLED.value
            payment.updated_at = now
            self.payment_repo.update(session, payment)

        if restock:
            details = self.order_repo.list_details(session, order.id)
            books = self.book_repo.get_many_for_update(
                session, (d.book_id for d in details)
            )
            for detail in details:
                book = books.get(detail.book_id)
                if book is not None:
                    self.book_repo.adjust_stock(session, book, detail.quantity)

    def _complete_cod_payments(self, session: Session, payments: list[Payment]) -> None:
        # Cash is collected on delivery.
        now = datetime.now(timezone.utc)
        for payment in payments:
            if (
                payment.payment_method == PaymentMethod.COD.value
                and payment.payment_status == PaymentStatus.PENDING.value
            ):
                payment.payment_status = PaymentStatus.COMPLETED.value
                payment.updated_at = now
                self.payment_repo.update(session, payment)

    def _detail_reads(self, session: Session, order_id: int) -> list[OrderDetailRead]:
        details = self.order_repo.list_details(session, order_id)
        titles = self.book_repo.titles_for(session, (d.book_id for d in details))
        return [
            OrderDetailRead(
                order_detail_id=d.id,
                book_id=d.book_id,
                title=titles.get(d.book_id),
                quantity=d.quantity,
                price=float(d.price),
                subtotal=float(d.price * d.quantity),
            )
            for d in details
        ]

    def _customer(self, session: Session, user_id: int) -> CustomerInfo | None:
        user = self.user_repo.get_by_id(session, user_id)
        if user is None:
            return None
        return CustomerInfo(
            user_id=user.id,
            full_name=user.full_name,
            email=user.email,
            phone=user.phone,
        )

    def _read_payment(
        self,
        session: Session,
        payment: Payment,
        with_details: bool,
    ) -> AdminPaymentRead:
        order = self.order_repo.get_by_id(session, payment.order_id)
        order_info = None
        if order is not None:
            order_info = PaymentOrderInfo(
                order_id=order.id,
                total_price=float(order.total_price),
                status=order.status,
                created_at=order.created_at,
                order_details=self._detail_reads(session, order.id) if with_details else None,
            )

        return AdminPaymentRead(
            payment_id=payment.id,
            order_id=payment.order_id,
            user_id=payment.user_id,
            amount=float(payment.amount),
            payment_method=payment.payment_method,
            payment_status=payment.payment_status,
            transaction_id=payment.transaction_id,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
            order=order_info,
            customer=self._customer(session, payment.user_id),
        )

    def _summarize(self, session: Session, order: Order) -> OrderSummary:
        details = self.order_repo.list_details(session, order.id)
        payments = self.payment_repo.list_for_order(session, order.id)
        latest = payments[0] if payments else None

        return OrderSummary(
            order_id=order.id,
            user_id=order.user_id,
            total_price=float(order.total_price),
            status=order.status,
            created_at=order.created_at,
            item_count=len(details),
            total_items=sum(d.quantity for d in details),
            payment=(
                PaymentSummary(
                    payment_method=latest.payment_method,
                    payment_status=latest.payment_status,
                )
                if latest
                else None
            ),
        )
