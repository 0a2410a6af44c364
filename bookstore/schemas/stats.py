# bookstore/schemas/stats.py
from datetime import datetime

from bookstore.schemas.common import CamelModel


class LatestOrderSummary(CamelModel):
    """
    Lightweight info for last N orders.
    """

    order_id: int
    user_id: int
    total_price: float
    status: str
    created_at: datetime


class DashboardStats(CamelModel):
    """
    Headline numbers for the admin dashboard.
    """

    total_books: int
    total_users: int
    total_orders: int
    total_revenue: float
    latest_orders: list[LatestOrderSummary]


class TopBook(CamelModel):
    """
    Aggregated stats for top-selling books.
    """

    book_id: int
    title: str
    total_quantity: int
    total_revenue: float
