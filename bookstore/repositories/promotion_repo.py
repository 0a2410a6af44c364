# bookstore/repositories/promotion_repo.py
from datetime import datetime

from sqlmodel import Session, select

from bookstore.models.promotion import Promotion, PromotionItem


class PromotionRepository:
    """
    Data access layer for promotions and promotion_items.
    """

    def get_by_id(self, session: Session, promotion_id: int) -> Promotion | None:
        return session.get(Promotion, promotion_id)

    def list_active(self, session: Session, now: datetime) -> list[Promotion]:
        stmt = (
            select(Promotion)
            .where(
                Promotion.is_active == True,  # noqa: E712
                Promotion.start_date <= now,
                Promotion.end_date >= now,
            )
            .order_by(Promotion.end_date)
        )
        return list(session.exec(stmt).all())

    def list_items(self, session: Session, promotion_id: int) -> list[PromotionItem]:
        stmt = select(PromotionItem).where(PromotionItem.promotion_id == promotion_id)
        return list(session.exec(stmt).all())

    def active_items_for_book(
        self,
        session: Session,
        book_id: int,
        now: datetime,
    ) -> list[tuple[Promotion, PromotionItem]]:
        stmt = (
            select(Promotion, PromotionItem)
            .join(PromotionItem, PromotionItem.promotion_id == Promotion.id)
            .where(
                PromotionItem.book_id == book_id,
                Promotion.is_active == True,  # noqa: E712
                Promotion.start_date <= now,
                Promotion.end_date >= now,
            )
        )
        return list(session.exec(stmt).all())

    def get_item(
        self,
        session: Session,
        promotion_id: int,
        book_id: int,
    ) -> PromotionItem | None:
        stmt = select(PromotionItem).where(
            PromotionItem.promotion_id == promotion_id,
            PromotionItem.book_id == book_id,
        )
        return session.exec(stmt).first()

    def create_item(self, session: Session, item: PromotionItem) -> PromotionItem:
        session.add(item)
        session.flush()
        return item
