# tests/test_locking.py
import pytest

from bookstore.repositories.book_repo import BookRepository
from bookstore.repositories.order_repo import OrderRepository
from bookstore.repositories.payment_repo import PaymentRepository


@pytest.fixture
def lock_log(monkeypatch):
    """
    Record the order in which workflows take row locks.
    """
    log: list[str] = []

    def recording(cls, name, label):
        wrapped = getattr(cls, name)

        def wrapper(self, *args, **kwargs):
            log.append(label)
            return wrapped(self, *args, **kwargs)

        monkeypatch.setattr(cls, name, wrapper)

    recording(OrderRepository, "get_for_update", "order")
    recording(PaymentRepository, "get_for_update", "payment")
    recording(PaymentRepository, "list_for_order_for_update", "payment")
    recording(BookRepository, "get_many_for_update", "books")
    return log


class TestLockOrder:
    """
    GUARANTEES:
    - Every workflow touching an existing order locks the order row first,
      then its payments, then books
    """

    def test_confirm_payment(self, user, make_book, fill_cart, checkout, confirm, lock_log):
        book = make_book(quantity=5)
        fill_cart(user, (book, 2))
        data = checkout(user.id, "Banking").json()["data"]
        lock_log.clear()

        assert confirm(data["paymentId"], True).status_code == 200

        assert lock_log == ["order", "payment", "books"]

    def test_failed_cod_confirmation(
        self, user, make_book, fill_cart, checkout, confirm, lock_log
    ):
        book = make_book(quantity=5)
        fill_cart(user, (book, 2))
        data = checkout(user.id, "COD").json()["data"]
        lock_log.clear()

        assert confirm(data["paymentId"], False).status_code == 200

        assert lock_log == ["order", "payment", "books"]

    def test_customer_cancel(self, client, user, make_book, fill_cart, checkout, lock_log):
        book = make_book(quantity=5)
        fill_cart(user, (book, 2))
        data = checkout(user.id, "Banking").json()["data"]
        lock_log.clear()

        assert client.delete(f"/api/orders/{data['orderId']}").status_code == 200

        assert lock_log == ["order", "payment"]

    def test_admin_cancel_with_restock(
        self, client, user, make_book, fill_cart, checkout, lock_log
    ):
        book = make_book(quantity=5)
        fill_cart(user, (book, 2))
        data = checkout(user.id, "COD").json()["data"]
        lock_log.clear()

        res = client.put(f"/api/orders/{data['orderId']}/status", json={"status": "cancelled"})

        assert res.status_code == 200
        assert lock_log == ["order", "payment", "books"]
