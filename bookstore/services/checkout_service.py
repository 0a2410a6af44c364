# bookstore/services/checkout_service.py
import logging
from decimal import Decimal
from urllib.parse import urlencode

from sqlmodel import Session

from bookstore.core.auth import AuthenticatedPrincipal
from bookstore.core.config import Settings, get_settings
from bookstore.core.errors import (
    CartChangedError,
    EmptyCartError,
    InsufficientStockError,
    InvalidPaymentMethodError,
    NotFoundError,
)
from bookstore.database import unit_of_work
from bookstore.models.catalog import Book
from bookstore.models.cart import CartItem
from bookstore.models.order import Order, OrderDetail, Payment
from bookstore.models.status import OrderStatus, PaymentMethod, PaymentStatus
from bookstore.repositories.book_repo import BookRepository
from bookstore.repositories.cart_repo import CartRepository
from bookstore.repositories.order_repo import OrderRepository
from bookstore.repositories.payment_repo import PaymentRepository
from bookstore.schemas.order import CheckoutResult
from bookstore.services.status_guard import ensure_consistent

logger = logging.getLogger(__name__)


def build_banking_qr_url(settings: Settings, amount: Decimal, order_id: int) -> str:
    """
    Bank transfer payload for a Banking order.

    The transfer content `<prefix><orderId>` is what staff match against
    the bank statement when confirming the payment.
    """
    query = urlencode(
        {
            "amount": f"{amount:.2f}",
            "orderId": order_id,
            "content": f"{settings.BANKING_TRANSFER_PREFIX}{order_id}",
            "bank": settings.BANKING_ACCOUNT_INFO,
        }
    )
    return f"{settings.BANKING_QR_BASE_URL}?{query}"


def price_cart(
    items: list[CartItem],
    books: dict[int, Book],
) -> tuple[Decimal, list[tuple[int, int, Decimal]]]:
    """
    Price cart lines at the current catalog price.

    Returns the order total and one (book_id, quantity, unit_price) tuple
    per line; the unit price becomes the order detail's permanent price.
    """
    total = Decimal("0")
    lines: list[tuple[int, int, Decimal]] = []
    for item in items:
        unit_price = Decimal(books[item.book_id].price or 0)
        total += unit_price * item.quantity
        lines.append((item.book_id, item.quantity, unit_price))
    return total, lines


class CheckoutService:
    """
    Converts a user's cart into an order + payment in one transaction.

    Steps:
      1. Lock the cart, load its items; error if empty.
      2. Lock referenced books and check stock for every line.
      3. Price lines at the current catalog price.
      4. Validate payment method (COD | Banking, case-insensitive).
      5. Create Order (status='pending') and its OrderDetails.
      6. Create Payment (status='Pending', amount=total).
      7. COD: confirm + take stock now.
         Banking: await payment, build the transfer QR payload.
      8. Clear cart items; a line already gone means a concurrent checkout.
      9. Commit; any failure rolls everything back.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        book_repo: BookRepository,
        order_repo: OrderRepository,
        payment_repo: PaymentRepository,
        settings: Settings | None = None,
    ):
        self.cart_repo = cart_repo
        self.book_repo = book_repo
        self.order_repo = order_repo
        self.payment_repo = payment_repo
        self.settings = settings or get_settings()

    def checkout(
        self,
        session: Session,
        principal: AuthenticatedPrincipal,
        payment_method: str,
    ) -> CheckoutResult:
        with unit_of_work(session, "Failed to create order"):
            # 1) Lock and load cart
            cart = self.cart_repo.get_for_user_for_update(session, principal.user_id)
            items = self.cart_repo.list_items(session, cart.id) if cart else []
            if not items:
                raise EmptyCartError()

            # 2) Stock check under row lock
            books = self.book_repo.get_many_for_update(
                session, (item.book_id for item in items)
            )
            for item in items:
                book = books.get(item.book_id)
                if book is None:
                    raise NotFoundError(f"Book {item.book_id} not found")
                if book.quantity < item.quantity:
                    raise InsufficientStockError(book.title, book.quantity)

            # 3) Price at current catalog price
            total_price, lines = price_cart(items, books)

            # 4) Payment method
            method = PaymentMethod.parse(payment_method)
            if method is None:
                raise InvalidPaymentMethodError(payment_method)

            # 5) Order + details
            order = self.order_repo.create_order(
                session,
                Order(
                    user_id=principal.user_id,
                    total_price=total_price,
                    status=OrderStatus.PENDING.value,
                ),
            )
            self.order_repo.create_details(
                session,
                [
                    OrderDetail(
                        order_id=order.id,
                        book_id=book_id,
                        quantity=quantity,
                        price=unit_price,
                    )
                    for book_id, quantity, unit_price in lines
                ],
            )

            # 6) Payment
            payment = self.payment_repo.create(
                session,
                Payment(
                    order_id=order.id,
                    user_id=principal.user_id,
                    amount=total_price,
                    payment_method=method.value,
                    payment_status=PaymentStatus.PENDING.value,
                ),
            )

            # 7) Branch per payment method
            qr_code_url: str | None = None
            if method is PaymentMethod.COD:
                order.status = OrderStatus.CONFIRMED.value
                for item in items:
                    self.book_repo.adjust_stock(session, books[item.book_id], -item.quantity)
            else:
                order.status = OrderStatus.AWAITING_PAYMENT.value
                qr_code_url = build_banking_qr_url(self.settings, total_price, order.id)
            self.order_repo.update_order(session, order)
            ensure_consistent(order, [payment])

            # 8) Clear cart
            if self.cart_repo.delete_items(session, items) != len(items):
                raise CartChangedError()

            result = CheckoutResult(
                order_id=order.id,
                payment_id=payment.id,
                total_price=float(total_price),
                status=order.status,
                payment_method=payment.payment_method,
                payment_status=payment.payment_status,
                qr_code_url=qr_code_url,
                created_at=order.created_at,
            )

        logger.info(
            "Checkout: user=%s order=%s payment=%s method=%s total=%s status=%s",
            principal.user_id,
            result.order_id,
            result.payment_id,
            result.payment_method,
            total_price,
            result.status,
        )
        return result
