# tests/test_payment_confirmation.py
from bookstore.models.catalog import Book


def _banking_order(user, make_book, fill_cart, checkout, stock=5, qty=2):
    book = make_book("Novel X", price="100000", quantity=stock)
    fill_cart(user, (book, qty))
    data = checkout(user.id, "Banking").json()["data"]
    return book, data


class TestBankingConfirmation:
    """
    GUARANTEES:
    - Stock is taken exactly once, on the first successful confirmation
    - A completed payment cannot be confirmed again
    - A late oversell aborts the confirmation without partial writes
    """

    def test_success_takes_stock_once(self, user, make_book, fill_cart, checkout, confirm, db):
        book, data = _banking_order(user, make_book, fill_cart, checkout)

        first = confirm(data["paymentId"], True, "TX-001")

        assert first.status_code == 200
        result = first.json()["data"]
        assert result == {
            "orderId": data["orderId"],
            "paymentId": data["paymentId"],
            "paymentStatus": "Completed",
            "orderStatus": "confirmed",
        }
        assert db.stock(book) == 3
        assert db.payments(data["orderId"])[0].transaction_id == "TX-001"
        assert db.payments(data["orderId"])[0].updated_at is not None

        second = confirm(data["paymentId"], True, "TX-002")

        assert second.status_code == 400
        assert second.json()["code"] == "already_confirmed"
        assert db.stock(book) == 3
        assert db.payments(data["orderId"])[0].transaction_id == "TX-001"

    def test_failure_cancels_without_stock_change(
        self, user, make_book, fill_cart, checkout, confirm, db
    ):
        book, data = _banking_order(user, make_book, fill_cart, checkout)

        res = confirm(data["paymentId"], False)

        assert res.status_code == 200
        assert res.json()["data"]["paymentStatus"] == "Failed"
        assert res.json()["data"]["orderStatus"] == "cancelled"
        assert db.stock(book) == 5

    def test_failed_payment_cannot_be_revived(
        self, user, make_book, fill_cart, checkout, confirm, db
    ):
        book, data = _banking_order(user, make_book, fill_cart, checkout)
        confirm(data["paymentId"], False)

        res = confirm(data["paymentId"], True)

        assert res.status_code == 400
        assert res.json()["code"] == "payment_not_pending"
        assert db.order(data["orderId"]).status == "cancelled"
        assert db.stock(book) == 5

    def test_late_oversell_aborts(
        self, session, user, make_book, fill_cart, checkout, confirm, db
    ):
        book, data = _banking_order(user, make_book, fill_cart, checkout, stock=5, qty=2)

        # Stock sold elsewhere between checkout and confirmation.
        stored = session.get(Book, book.id)
        stored.quantity = 1
        session.add(stored)
        session.commit()

        res = confirm(data["paymentId"], True, "TX-LATE")

        assert res.status_code == 400
        body = res.json()
        assert body["code"] == "insufficient_stock"
        assert body["title"] == "Novel X"
        assert db.stock(book) == 1
        assert db.order(data["orderId"]).status == "awaiting_payment"
        payment = db.payments(data["orderId"])[0]
        assert payment.payment_status == "Pending"
        assert payment.transaction_id is None

    def test_late_oversell_on_one_line_keeps_other_lines(
        self, session, user, make_book, fill_cart, checkout, confirm, db
    ):
        plenty = make_book("Plenty", quantity=10)
        scarce = make_book("Scarce", quantity=3)
        fill_cart(user, (plenty, 4), (scarce, 3))
        data = checkout(user.id, "Banking").json()["data"]

        stored = session.get(Book, scarce.id)
        stored.quantity = 2
        session.add(stored)
        session.commit()

        res = confirm(data["paymentId"], True)

        assert res.status_code == 400
        assert db.stock(plenty) == 10
        assert db.stock(scarce) == 2

    def test_unknown_payment(self, confirm):
        res = confirm(424242, True)

        assert res.status_code == 404
        assert res.json()["success"] is False


class TestCodConfirmation:
    """
    COD stock is taken at checkout; confirming the cash never takes it again.
    """

    def test_success_does_not_take_stock_again(
        self, user, make_book, fill_cart, checkout, confirm, db
    ):
        book = make_book(quantity=5)
        fill_cart(user, (book, 2))
        data = checkout(user.id, "COD").json()["data"]

        res = confirm(data["paymentId"], True, "CASH-1")

        assert res.status_code == 200
        assert res.json()["data"]["paymentStatus"] == "Completed"
        assert res.json()["data"]["orderStatus"] == "confirmed"
        assert db.stock(book) == 3

    def test_failure_returns_stock(self, user, make_book, fill_cart, checkout, confirm, db):
        book = make_book(quantity=5)
        fill_cart(user, (book, 2))
        data = checkout(user.id, "COD").json()["data"]

        res = confirm(data["paymentId"], False)

        assert res.status_code == 200
        assert res.json()["data"]["orderStatus"] == "cancelled"
        assert db.stock(book) == 5
