# tests/test_stats.py


def _put_status(client, order_id, status):
    res = client.put(f"/api/orders/{order_id}/status", json={"status": status})
    assert res.status_code == 200


class TestDashboard:
    def test_counts_and_delivered_revenue(
        self, client, user, make_user, make_book, fill_cart, checkout
    ):
        make_user("admin@example.com", role="admin")
        book = make_book(price="100", quantity=20)

        fill_cart(user, (book, 2))
        delivered_id = checkout(user.id, "COD").json()["data"]["orderId"]
        _put_status(client, delivered_id, "shipping")
        _put_status(client, delivered_id, "delivered")

        fill_cart(user, (book, 3))
        checkout(user.id, "COD")

        fill_cart(user, (book, 1))
        checkout(user.id, "Banking")

        res = client.get("/api/admin/dashboard/stats")

        assert res.status_code == 200
        stats = res.json()["data"]
        assert stats["totalBooks"] == 1
        assert stats["totalUsers"] == 1
        assert stats["totalOrders"] == 3
        assert stats["totalRevenue"] == 200
        assert len(stats["latestOrders"]) == 3

    def test_empty_store(self, client):
        stats = client.get("/api/admin/dashboard/stats").json()["data"]

        assert stats["totalOrders"] == 0
        assert stats["totalRevenue"] == 0
        assert stats["latestOrders"] == []


class TestTopBooks:
    def test_ranked_by_quantity_without_cancelled(
        self, client, user, make_book, fill_cart, checkout
    ):
        hit = make_book("Hit", price="10", quantity=50)
        steady = make_book("Steady", price="20", quantity=50)

        fill_cart(user, (hit, 5), (steady, 2))
        checkout(user.id, "COD")

        fill_cart(user, (steady, 10))
        cancelled_id = checkout(user.id, "Banking").json()["data"]["orderId"]
        assert client.delete(f"/api/orders/{cancelled_id}").status_code == 200

        res = client.get("/api/admin/dashboard/top-books", params={"limit": 5})

        assert res.status_code == 200
        top = res.json()["data"]
        assert [b["title"] for b in top] == ["Hit", "Steady"]
        assert top[0]["totalQuantity"] == 5
        assert top[0]["totalRevenue"] == 50
        assert top[1]["totalQuantity"] == 2

    def test_limit_bounds(self, client):
        assert client.get("/api/admin/dashboard/top-books", params={"limit": 0}).status_code == 400
        assert client.get("/api/admin/dashboard/top-books", params={"limit": 101}).status_code == 400
