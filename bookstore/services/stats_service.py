# bookstore/services/stats_service.py
from sqlmodel import Session

from bookstore.core.errors import ValidationError
from bookstore.repositories.stats_repo import StatsRepository
from bookstore.schemas.stats import DashboardStats, LatestOrderSummary, TopBook


class StatsService:
    """
    Orchestrates aggregated admin dashboard statistics.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def get_dashboard_stats(
        self,
        session: Session,
        latest_n_orders: int = 5,
    ) -> DashboardStats:
        latest_orders = [
            LatestOrderSummary(
                order_id=o.id,
                user_id=o.user_id,
                total_price=float(o.total_price),
                status=o.status,
                created_at=o.created_at,
            )
            for o in self.repo.latest_orders(session, limit=latest_n_orders)
        ]

        return DashboardStats(
            total_books=self.repo.count_books(session),
            total_users=self.repo.count_customers(session),
            total_orders=self.repo.count_orders(session),
            total_revenue=float(self.repo.delivered_revenue(session)),
            latest_orders=latest_orders,
        )

    def get_top_books(self, session: Session, limit: int = 10) -> list[TopBook]:
        if not 1 <= limit <= 100:
            raise ValidationError("limit must be between 1 and 100")

        top_books: list[TopBook] = []
        for book_id, title, total_quantity, total_revenue in self.repo.top_books(
            session, limit=limit
        ):
            top_books.append(
                TopBook(
                    book_id=book_id,
                    title=title,
                    total_quantity=int(total_quantity or 0),
                    total_revenue=float(total_revenue or 0),
                )
            )
        return top_books
