# bookstore/services/cart_service.py
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from bookstore.core.auth import AuthenticatedPrincipal
from bookstore.core.errors import ConflictError, InsufficientStockError, NotFoundError
from bookstore.database import unit_of_work
from bookstore.models.cart import CartItem
from bookstore.models.catalog import Book
from bookstore.repositories.book_repo import BookRepository
from bookstore.repositories.cart_repo import CartRepository
from bookstore.schemas.cart import (
    AddToCartRequest,
    CartItemRead,
    CartRead,
    UpdateCartItemRequest,
)


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - create the user's cart lazily on first add
      - validate book existence
      - enforce quantity <= book stock (quantity accumulates on re-add)
      - price lines at the current catalog price for display
    """

    def __init__(self, cart_repo: CartRepository, book_repo: BookRepository):
        self.cart_repo = cart_repo
        self.book_repo = book_repo

    # ---- internal helpers ----

    def _get_book(self, session: Session, book_id: int) -> Book:
        book = self.book_repo.get_by_id(session, book_id)
        if not book:
            raise NotFoundError("Book not found")
        return book

    def _get_owned_item(
        self,
        session: Session,
        principal: AuthenticatedPrincipal,
        cart_item_id: int,
    ) -> CartItem:
        cart = self.cart_repo.get_for_user(session, principal.user_id)
        item = self.cart_repo.get_item_by_id(session, cart_item_id)
        if not cart or not item or item.cart_id != cart.id:
            raise NotFoundError("Cart item not found")
        return item

    # ---- public operations ----

    def get_cart(
        self,
        session: Session,
        principal: AuthenticatedPrincipal,
    ) -> CartRead:
        """
        Return full cart:
          - list of CartItemRead (with line_total)
          - total_quantity
          - total_price
        A user without a cart gets an empty one.
        """
        cart = self.cart_repo.get_for_user(session, principal.user_id)
        if cart is None:
            return CartRead(
                cart_id=None,
                user_id=principal.user_id,
                items=[],
                total_quantity=0,
                total_price=0.0,
            )

        item_reads: list[CartItemRead] = []
        total_qty = 0
        total_price = 0.0

        for it in self.cart_repo.list_items(session, cart.id):
            book = self.book_repo.get_by_id(session, it.book_id)
            if book is None:
                continue
            price = float(book.price)
            line_total = it.quantity * price
            total_qty += it.quantity
            total_price += line_total

            item_reads.append(
                CartItemRead(
                    cart_item_id=it.id,
                    book_id=it.book_id,
                    title=book.title,
                    price=price,
                    quantity=it.quantity,
                    line_total=line_total,
                    image_url=book.image_url,
                )
            )

        return CartRead(
            cart_id=cart.id,
            user_id=cart.user_id,
            items=item_reads,
            total_quantity=total_qty,
            total_price=total_price,
        )

    def add_to_cart(
        self,
        session: Session,
        principal: AuthenticatedPrincipal,
        payload: AddToCartRequest,
    ) -> CartRead:
        """
        Add a book to the user's cart.

        Rules:
          - book must exist
          - quantity + existing_quantity <= book stock
        """
        with unit_of_work(session, "Failed to add item to cart"):
            book = self._get_book(session, payload.book_id)

            cart = self.cart_repo.get_for_user(session, principal.user_id)
            if cart is None:
                cart = self.cart_repo.create_for_user(session, principal.user_id)

            existing = self.cart_repo.get_item(session, cart.id, payload.book_id)
            new_qty = payload.quantity + (existing.quantity if existing else 0)
            if new_qty > book.quantity:
                raise InsufficientStockError(book.title, book.quantity)

            if existing:
                existing.quantity = new_qty
                self.cart_repo.save_item(session, existing)
            else:
                try:
                    self.cart_repo.save_item(
                        session,
                        CartItem(cart_id=cart.id, book_id=book.id, quantity=new_qty),
                    )
                except IntegrityError as exc:
                    raise ConflictError("Cart changed concurrently, please retry") from exc

        return self.get_cart(session, principal)

    def update_item(
        self,
        session: Session,
        principal: AuthenticatedPrincipal,
        payload: UpdateCartItemRequest,
    ) -> CartRead:
        """
        Set the quantity of a line in the cart.

        If quantity exceeds book stock => 400.
        """
        with unit_of_work(session, "Failed to update cart item"):
            item = self._get_owned_item(session, principal, payload.cart_item_id)
            book = self._get_book(session, item.book_id)
            if payload.quantity > book.quantity:
                raise InsufficientStockError(book.title, book.quantity)

            item.quantity = payload.quantity
            self.cart_repo.save_item(session, item)

        return self.get_cart(session, principal)

    def remove_item(
        self,
        session: Session,
        principal: AuthenticatedPrincipal,
        cart_item_id: int,
    ) -> CartRead:
        """
        Remove a line from the cart and return the updated cart.
        """
        with unit_of_work(session, "Failed to remove cart item"):
            item = self._get_owned_item(session, principal, cart_item_id)
            self.cart_repo.delete_item(session, item)

        return self.get_cart(session, principal)
