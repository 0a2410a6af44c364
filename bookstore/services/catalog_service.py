# bookstore/services/catalog_service.py
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from bookstore.core.errors import ConflictError, NotFoundError
from bookstore.database import unit_of_work
from bookstore.models.catalog import Book
from bookstore.models.promotion import Promotion, PromotionItem
from bookstore.repositories.book_repo import BookRepository
from bookstore.repositories.promotion_repo import PromotionRepository
from bookstore.schemas.catalog import (
    BookRead,
    PromotionItemCreate,
    PromotionItemRead,
    PromotionRead,
)

CENT = Decimal("0.01")


def apply_discount(
    price: Decimal,
    promotion: Promotion,
    item: PromotionItem | None = None,
) -> Decimal:
    """
    Price after one promotion, never below zero.

    The item's specific_discount overrides the promotion's discount_value.
    Unknown promotion types leave the price unchanged.
    """
    value = Decimal(promotion.discount_value)
    if item is not None and item.specific_discount is not None:
        value = Decimal(item.specific_discount)

    kind = promotion.promotion_type.strip().lower()
    if kind == "percentage":
        discounted = price - price * value / Decimal(100)
    elif kind == "fixed":
        discounted = price - value
    else:
        discounted = price

    return max(discounted, Decimal("0")).quantize(CENT, rounding=ROUND_HALF_UP)


class CatalogService:
    """
    Read side of the catalog plus promotion display pricing.

    Promotions only affect the displayed price; checkout charges the
    catalog price.
    """

    def __init__(self, book_repo: BookRepository, promotion_repo: PromotionRepository):
        self.book_repo = book_repo
        self.promotion_repo = promotion_repo

    def list_books(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        category_id: int | None = None,
    ) -> list[BookRead]:
        books = self.book_repo.list(session, skip, limit, category_id=category_id)
        return [self._to_read(session, b) for b in books]

    def get_book(self, session: Session, book_id: int) -> BookRead:
        book = self.book_repo.get_by_id(session, book_id)
        if not book:
            raise NotFoundError("Book not found")
        return self._to_read(session, book)

    def discounted_price(self, session: Session, book: Book) -> Decimal:
        """
        Lowest price among the book's currently active promotions.
        """
        price = Decimal(book.price)
        now = datetime.now(timezone.utc)
        best = price
        for promotion, item in self.promotion_repo.active_items_for_book(session, book.id, now):
            best = min(best, apply_discount(price, promotion, item))
        return best

    # ---- Promotions ----

    def list_active_promotions(self, session: Session) -> list[PromotionRead]:
        now = datetime.now(timezone.utc)
        return [
            PromotionRead(
                promotion_id=p.id,
                name=p.name,
                promotion_type=p.promotion_type,
                discount_value=float(p.discount_value),
                start_date=p.start_date,
                end_date=p.end_date,
                book_ids=[i.book_id for i in self.promotion_repo.list_items(session, p.id)],
            )
            for p in self.promotion_repo.list_active(session, now)
        ]

    def add_book_to_promotion(
        self,
        session: Session,
        payload: PromotionItemCreate,
    ) -> PromotionItemRead:
        """
        Scope a promotion to a book.

        Raises:
            NotFoundError: unknown promotion or book.
            ConflictError: the book is already in this promotion.
        """
        with unit_of_work(session, "Failed to add book to promotion"):
            if not self.promotion_repo.get_by_id(session, payload.promotion_id):
                raise NotFoundError("Promotion not found")
            if not self.book_repo.get_by_id(session, payload.book_id):
                raise NotFoundError("Book not found")
            if self.promotion_repo.get_item(session, payload.promotion_id, payload.book_id):
                raise ConflictError("Book already in this promotion")

            try:
                item = self.promotion_repo.create_item(
                    session,
                    PromotionItem(
                        promotion_id=payload.promotion_id,
                        book_id=payload.book_id,
                        specific_discount=payload.specific_discount,
                    ),
                )
            except IntegrityError as exc:
                raise ConflictError("Book already in this promotion") from exc
            result = PromotionItemRead(
                promo_item_id=item.id,
                promotion_id=item.promotion_id,
                book_id=item.book_id,
                specific_discount=(
                    float(item.specific_discount)
                    if item.specific_discount is not None
                    else None
                ),
            )
        return result

    # ---- helpers ----

    def _to_read(self, session: Session, book: Book) -> BookRead:
        author = self.book_repo.get_author(session, book.author_id)
        publisher = self.book_repo.get_publisher(session, book.publisher_id)
        category = self.book_repo.get_category(session, book.category_id)

        return BookRead(
            book_id=book.id,
            title=book.title,
            price=float(book.price),
            discounted_price=float(self.discounted_price(session, book)),
            quantity=book.quantity,
            description=book.description,
            image_url=book.image_url,
            author=author.name if author else None,
            publisher=publisher.name if publisher else None,
            category=category.name if category else None,
        )
