# bookstore/routers/cart.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from bookstore.core.auth import AuthenticatedPrincipal, get_token_principal, resolve_principal
from bookstore.database import get_session
from bookstore.repositories.book_repo import BookRepository
from bookstore.repositories.cart_repo import CartRepository
from bookstore.schemas.cart import AddToCartRequest, CartRead, UpdateCartItemRequest
from bookstore.schemas.common import ApiResponse
from bookstore.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
book_repo = BookRepository()
service = CartService(cart_repo, book_repo)


@router.get("", response_model=ApiResponse[CartRead])
def get_cart(
    user_id: int | None = Query(default=None, alias="userId"),
    session: Session = Depends(get_session),
    token_principal: AuthenticatedPrincipal | None = Depends(get_token_principal),
):
    """
    Get the user's cart with line totals.

    Query params:
      - userId (legacy identification when no Bearer token is sent)
    """
    principal = resolve_principal(session, user_id, token_principal)
    return ApiResponse[CartRead](data=service.get_cart(session, principal))


@router.post("/add", response_model=ApiResponse[CartRead])
def add_to_cart(
    payload: AddToCartRequest,
    session: Session = Depends(get_session),
    token_principal: AuthenticatedPrincipal | None = Depends(get_token_principal),
):
    """
    Add a book to the cart; quantity accumulates for a book already there.
    """
    principal = resolve_principal(session, payload.user_id, token_principal)
    cart = service.add_to_cart(session, principal, payload)
    return ApiResponse[CartRead](message="Item added to cart", data=cart)


@router.put("/update", response_model=ApiResponse[CartRead])
def update_cart_item(
    payload: UpdateCartItemRequest,
    session: Session = Depends(get_session),
    token_principal: AuthenticatedPrincipal | None = Depends(get_token_principal),
):
    """
    Set the quantity of a cart line.
    """
    principal = resolve_principal(session, payload.user_id, token_principal)
    cart = service.update_item(session, principal, payload)
    return ApiResponse[CartRead](message="Cart item updated", data=cart)


@router.delete("/remove/{cart_item_id}", response_model=ApiResponse[CartRead])
def remove_cart_item(
    cart_item_id: int,
    user_id: int | None = Query(default=None, alias="userId"),
    session: Session = Depends(get_session),
    token_principal: AuthenticatedPrincipal | None = Depends(get_token_principal),
):
    """
    Remove a line from the cart.
    """
    principal = resolve_principal(session, user_id, token_principal)
    cart = service.remove_item(session, principal, cart_item_id)
    return ApiResponse[CartRead](message="Item removed from cart", data=cart)
