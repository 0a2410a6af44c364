# bookstore/routers/admin.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from bookstore.database import get_session
from bookstore.repositories.book_repo import BookRepository
from bookstore.repositories.order_repo import OrderRepository
from bookstore.repositories.payment_repo import PaymentRepository
from bookstore.repositories.promotion_repo import PromotionRepository
from bookstore.repositories.stats_repo import StatsRepository
from bookstore.repositories.user_repo import UserRepository
from bookstore.schemas.catalog import PromotionItemCreate, PromotionItemRead
from bookstore.schemas.common import ApiResponse
from bookstore.schemas.order import AdminOrderRead, AdminPaymentRead, OrderSummary
from bookstore.schemas.stats import DashboardStats, TopBook
from bookstore.services.catalog_service import CatalogService
from bookstore.services.order_service import OrderService
from bookstore.services.stats_service import StatsService

router = APIRouter(prefix="/admin", tags=["Admin"])

book_repo = BookRepository()
order_service = OrderService(
    OrderRepository(), PaymentRepository(), book_repo, UserRepository()
)
stats_service = StatsService(StatsRepository())
catalog_service = CatalogService(book_repo, PromotionRepository())


# -------- Orders --------


@router.get("/orders", response_model=ApiResponse[list[OrderSummary]])
def list_all_orders(
    session: Session = Depends(get_session),
    status: str | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List all orders, newest first.

    Query params (optional):
      - status: one of the order statuses
      - skip / limit: pagination
    """
    return ApiResponse[list[OrderSummary]](
        data=order_service.list_all_orders(session, status, skip, limit)
    )


@router.get("/orders/{order_id}", response_model=ApiResponse[AdminOrderRead])
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
):
    """
    Single order with lines, payments and customer.
    """
    return ApiResponse[AdminOrderRead](data=order_service.get_admin_order(session, order_id))


# -------- Payments --------


@router.get("/payments", response_model=ApiResponse[list[AdminPaymentRead]])
def list_payments(
    session: Session = Depends(get_session),
    status: str | None = None,
    payment_method: str | None = Query(default=None, alias="paymentMethod"),
    skip: int = 0,
    limit: int = 50,
):
    """
    List payments, newest first.

    Query params (optional):
      - status: Pending | Completed | Failed | Cancelled
      - paymentMethod: COD | Banking
      - skip / limit: pagination
    """
    return ApiResponse[list[AdminPaymentRead]](
        data=order_service.list_payments(session, status, payment_method, skip, limit)
    )


@router.get("/payments/{payment_id}", response_model=ApiResponse[AdminPaymentRead])
def get_payment(
    payment_id: int,
    session: Session = Depends(get_session),
):
    return ApiResponse[AdminPaymentRead](data=order_service.get_payment(session, payment_id))


# -------- Dashboard --------


@router.get("/dashboard/stats", response_model=ApiResponse[DashboardStats])
def get_dashboard_stats(session: Session = Depends(get_session)):
    """
    Aggregated statistics for the admin dashboard.
    Revenue counts delivered orders only.
    """
    return ApiResponse[DashboardStats](data=stats_service.get_dashboard_stats(session))


@router.get("/dashboard/top-books", response_model=ApiResponse[list[TopBook]])
def get_top_books(
    session: Session = Depends(get_session),
    limit: int = 10,
):
    """
    Best sellers by quantity over non-cancelled orders.
    """
    return ApiResponse[list[TopBook]](data=stats_service.get_top_books(session, limit))


# -------- Promotions --------


@router.post("/promotion-items", response_model=ApiResponse[PromotionItemRead])
def add_book_to_promotion(
    payload: PromotionItemCreate,
    session: Session = Depends(get_session),
):
    item = catalog_service.add_book_to_promotion(session, payload)
    return ApiResponse[PromotionItemRead](
        message="Book added to promotion successfully", data=item
    )
