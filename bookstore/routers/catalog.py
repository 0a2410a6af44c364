# bookstore/routers/catalog.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from bookstore.database import get_session
from bookstore.repositories.book_repo import BookRepository
from bookstore.repositories.promotion_repo import PromotionRepository
from bookstore.schemas.catalog import BookRead, PromotionRead
from bookstore.schemas.common import ApiResponse
from bookstore.services.catalog_service import CatalogService

router = APIRouter(tags=["Catalog"])

book_repo = BookRepository()
promotion_repo = PromotionRepository()
service = CatalogService(book_repo, promotion_repo)


@router.get("/books", response_model=ApiResponse[list[BookRead]])
def list_books(
    session: Session = Depends(get_session),
    category_id: int | None = Query(default=None, alias="categoryId"),
    skip: int = 0,
    limit: int = 50,
):
    """
    Storefront book listing with display prices.
    """
    return ApiResponse[list[BookRead]](
        data=service.list_books(session, skip, limit, category_id=category_id)
    )


@router.get("/books/{book_id}", response_model=ApiResponse[BookRead])
def get_book(
    book_id: int,
    session: Session = Depends(get_session),
):
    return ApiResponse[BookRead](data=service.get_book(session, book_id))


@router.get("/promotions/active", response_model=ApiResponse[list[PromotionRead]])
def list_active_promotions(session: Session = Depends(get_session)):
    """
    Promotions currently inside their time window, with the books they cover.
    """
    return ApiResponse[list[PromotionRead]](data=service.list_active_promotions(session))
