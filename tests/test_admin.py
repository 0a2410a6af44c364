# tests/test_admin.py
import pytest


@pytest.fixture
def two_orders(user, make_book, fill_cart, checkout):
    book = make_book("Novel X", price="100000", quantity=10)
    fill_cart(user, (book, 1))
    cod = checkout(user.id, "COD").json()["data"]
    fill_cart(user, (book, 2))
    banking = checkout(user.id, "Banking").json()["data"]
    return cod, banking


class TestAdminPayments:
    def test_list_newest_first(self, client, two_orders):
        cod, banking = two_orders

        res = client.get("/api/admin/payments")

        assert res.status_code == 200
        payments = res.json()["data"]
        assert [p["paymentId"] for p in payments] == [banking["paymentId"], cod["paymentId"]]
        assert payments[0]["order"]["status"] == "awaiting_payment"
        assert payments[0]["order"]["orderDetails"] is None
        assert payments[0]["customer"]["email"] == "reader@example.com"

    def test_find_pending_banking_payment(self, client, two_orders):
        _, banking = two_orders

        res = client.get(
            "/api/admin/payments", params={"status": "pending", "paymentMethod": "BANKING"}
        )

        assert res.status_code == 200
        assert [p["paymentId"] for p in res.json()["data"]] == [banking["paymentId"]]

    def test_filters_follow_confirmation(self, client, confirm, two_orders):
        cod, banking = two_orders
        confirm(banking["paymentId"], True, "TX-9")

        completed = client.get("/api/admin/payments", params={"status": "Completed"})

        assert [p["paymentId"] for p in completed.json()["data"]] == [banking["paymentId"]]
        assert completed.json()["data"][0]["transactionId"] == "TX-9"

    def test_paging(self, client, two_orders):
        cod, _ = two_orders

        res = client.get("/api/admin/payments", params={"skip": 1, "limit": 1})

        assert [p["paymentId"] for p in res.json()["data"]] == [cod["paymentId"]]

    def test_rejects_unknown_filters(self, client):
        bad_status = client.get("/api/admin/payments", params={"status": "Refunded"})
        bad_method = client.get("/api/admin/payments", params={"paymentMethod": "Crypto"})

        assert bad_status.status_code == 400
        assert bad_status.json()["code"] == "invalid_status"
        assert bad_method.status_code == 400
        assert bad_method.json()["code"] == "invalid_payment_method"

    def test_single_payment_with_order_lines(self, client, two_orders):
        _, banking = two_orders

        res = client.get(f"/api/admin/payments/{banking['paymentId']}")

        assert res.status_code == 200
        payment = res.json()["data"]
        assert payment["orderId"] == banking["orderId"]
        assert payment["amount"] == 200000
        assert payment["paymentMethod"] == "Banking"
        lines = payment["order"]["orderDetails"]
        assert [(d["title"], d["quantity"], d["price"]) for d in lines] == [
            ("Novel X", 2, 100000)
        ]

    def test_unknown_payment(self, client):
        res = client.get("/api/admin/payments/4040")

        assert res.status_code == 404
        assert res.json()["message"] == "Payment not found"


class TestAdminOrderDetail:
    def test_order_with_customer(self, client, user, two_orders):
        cod, _ = two_orders

        res = client.get(f"/api/admin/orders/{cod['orderId']}")

        assert res.status_code == 200
        order = res.json()["data"]
        assert order["status"] == "confirmed"
        assert order["customer"] == {
            "userId": user.id,
            "fullName": "reader",
            "email": "reader@example.com",
            "phone": None,
        }
        assert order["orderDetails"][0]["quantity"] == 1
        assert order["payments"][0]["paymentId"] == cod["paymentId"]

    def test_unknown_order(self, client):
        assert client.get("/api/admin/orders/777").status_code == 404
