# tests/test_catalog.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from bookstore.models.promotion import Promotion, PromotionItem
from bookstore.repositories.promotion_repo import PromotionRepository
from bookstore.services.catalog_service import apply_discount


def _promotion(kind="percentage", value="10", **kwargs):
    now = datetime.now(timezone.utc)
    return Promotion(
        name=kwargs.pop("name", "Autumn sale"),
        promotion_type=kind,
        discount_value=Decimal(value),
        start_date=kwargs.pop("start_date", now - timedelta(days=1)),
        end_date=kwargs.pop("end_date", now + timedelta(days=1)),
        **kwargs,
    )


@pytest.fixture
def make_promotion(session):
    def _make(*books, kind="percentage", value="10", specific=None, **kwargs):
        promotion = _promotion(kind, value, **kwargs)
        session.add(promotion)
        session.commit()
        session.refresh(promotion)
        for book in books:
            session.add(
                PromotionItem(
                    promotion_id=promotion.id, book_id=book.id, specific_discount=specific
                )
            )
        session.commit()
        return promotion

    return _make


class TestApplyDiscount:
    @pytest.mark.parametrize(
        "kind, value, expected",
        [
            ("percentage", "10", "90.00"),
            ("PERCENTAGE", "12.5", "87.50"),
            ("fixed", "30", "70.00"),
            ("fixed", "250", "0.00"),
            ("bogo", "50", "100.00"),
        ],
    )
    def test_promotion_types(self, kind, value, expected):
        assert apply_discount(Decimal("100"), _promotion(kind, value)) == Decimal(expected)

    def test_specific_discount_overrides(self):
        item = PromotionItem(promotion_id=1, book_id=1, specific_discount=Decimal("50"))

        assert apply_discount(Decimal("80"), _promotion("percentage", "10"), item) == Decimal("40.00")


class TestBooks:
    def test_discounted_price_uses_best_active_promotion(self, client, make_book, make_promotion):
        book = make_book(price="200", quantity=3)
        make_promotion(book, kind="percentage", value="10")
        make_promotion(book, kind="fixed", value="50", name="Flash")

        res = client.get(f"/api/books/{book.id}")

        assert res.status_code == 200
        data = res.json()["data"]
        assert data["price"] == 200
        assert data["discountedPrice"] == 150
        assert data["quantity"] == 3

    def test_expired_promotion_is_ignored(self, client, make_book, make_promotion):
        book = make_book(price="200")
        now = datetime.now(timezone.utc)
        make_promotion(book, start_date=now - timedelta(days=10), end_date=now - timedelta(days=5))

        data = client.get(f"/api/books/{book.id}").json()["data"]

        assert data["discountedPrice"] == 200

    def test_checkout_charges_catalog_price(
        self, make_book, make_promotion, user, fill_cart, checkout
    ):
        book = make_book(price="200", quantity=3)
        make_promotion(book, kind="fixed", value="50")
        fill_cart(user, (book, 1))

        res = checkout(user.id, "COD")

        assert res.json()["data"]["totalPrice"] == 200

    def test_list_books(self, client, make_book):
        make_book("A")
        make_book("B")

        res = client.get("/api/books")

        assert res.status_code == 200
        assert [b["title"] for b in res.json()["data"]] == ["A", "B"]

    def test_unknown_book(self, client):
        assert client.get("/api/books/5150").status_code == 404


class TestPromotions:
    def test_active_promotions(self, client, make_book, make_promotion):
        book = make_book()
        now = datetime.now(timezone.utc)
        current = make_promotion(book)
        make_promotion(
            book, name="Old", start_date=now - timedelta(days=9), end_date=now - timedelta(days=2)
        )
        make_promotion(book, name="Paused", is_active=False)

        res = client.get("/api/promotions/active")

        assert res.status_code == 200
        promotions = res.json()["data"]
        assert [p["promotionId"] for p in promotions] == [current.id]
        assert promotions[0]["bookIds"] == [book.id]

    def test_add_book_to_promotion(self, client, make_book, make_promotion):
        book = make_book()
        promotion = make_promotion()
        body = {"promotionId": promotion.id, "bookId": book.id, "specificDiscount": 15}

        res = client.post("/api/admin/promotion-items", json=body)

        assert res.status_code == 200
        assert res.json()["data"]["bookId"] == book.id
        assert res.json()["data"]["specificDiscount"] == 15

        again = client.post("/api/admin/promotion-items", json=body)

        assert again.status_code == 409
        assert again.json()["code"] == "conflict"

    def test_add_to_unknown_promotion(self, client, make_book):
        book = make_book()

        res = client.post(
            "/api/admin/promotion-items", json={"promotionId": 8, "bookId": book.id}
        )

        assert res.status_code == 404

    def test_book_listed_once_per_promotion(self, session, make_book, make_promotion):
        book = make_book()
        promotion = make_promotion(book)

        session.add(PromotionItem(promotion_id=promotion.id, book_id=book.id))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_duplicate_slipping_past_the_read_is_a_conflict(
        self, client, monkeypatch, make_book, make_promotion
    ):
        book = make_book()
        promotion = make_promotion(book)
        monkeypatch.setattr(
            PromotionRepository, "get_item", lambda self, session, promotion_id, book_id: None
        )

        res = client.post(
            "/api/admin/promotion-items", json={"promotionId": promotion.id, "bookId": book.id}
        )

        assert res.status_code == 409
        assert res.json()["code"] == "conflict"
