# bookstore/repositories/stats_repo.py
from decimal import Decimal

from sqlalchemy import func
from sqlmodel import Session, select

from bookstore.models.catalog import Book
from bookstore.models.order import Order, OrderDetail
from bookstore.models.status import OrderStatus
from bookstore.models.user import User


class StatsRepository:
    """
    Read-only aggregated queries for admin dashboard.
    """

    def count_books(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Book)
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_customers(self, session: Session) -> int:
        stmt = select(func.count()).select_from(User).where(User.role == "user")
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_orders(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Order)
        value = session.exec(stmt).one()
        return int(value or 0)

    def delivered_revenue(self, session: Session) -> Decimal:
        """
        Sum of total_price for delivered orders only.
        """
        stmt = (
            select(func.coalesce(func.sum(Order.total_price), 0))
            .where(Order.status == OrderStatus.DELIVERED.value)
        )
        value = session.exec(stmt).one()
        return Decimal(str(value or 0))

    def top_books(
        self,
        session: Session,
        limit: int = 10,
    ) -> list[tuple]:
        """
        Top books by quantity sold across all non-cancelled orders.
        """
        qty_sum = func.coalesce(func.sum(OrderDetail.quantity), 0)
        revenue_sum = func.coalesce(
            func.sum(OrderDetail.quantity * OrderDetail.price),
            0,
        )

        stmt = (
            select(
                OrderDetail.book_id,
                Book.title,
                qty_sum.label("total_quantity"),
                revenue_sum.label("total_revenue"),
            )
            .join(Order, Order.id == OrderDetail.order_id)
            .join(Book, Book.id == OrderDetail.book_id)
            .where(Order.status != OrderStatus.CANCELLED.value)
            .group_by(OrderDetail.book_id, Book.title)
            .order_by(qty_sum.desc(), OrderDetail.book_id)
            .limit(limit)
        )

        return list(session.exec(stmt).all())

    def latest_orders(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[Order]:
        """
        Latest N orders by created_at (any status).
        """
        stmt = (
            select(Order)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())
