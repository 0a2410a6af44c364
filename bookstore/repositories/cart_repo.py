# bookstore/repositories/cart_repo.py
from sqlalchemy import delete
from sqlmodel import Session, select

from bookstore.models.cart import Cart, CartItem


class CartRepository:
    """
    Data access layer for carts and cart_items.

    NOTE:
      - No commits here; cart mutations and checkout run inside the
        service's unit of work.
    """

    # ---- Carts ----

    def get_for_user(self, session: Session, user_id: int) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id)
        return session.exec(stmt).first()

    def get_for_user_for_update(self, session: Session, user_id: int) -> Cart | None:
        """
        Load the user's cart with a row lock (SELECT ... FOR UPDATE).

        Checkouts of the same cart queue on this lock; the later one sees
        the emptied cart.
        """
        stmt = (
            select(Cart)
            .where(Cart.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return session.exec(stmt).first()

    def create_for_user(self, session: Session, user_id: int) -> Cart:
        cart = Cart(user_id=user_id)
        session.add(cart)
        session.flush()  # Assign PK
        return cart

    # ---- Items ----

    def list_items(self, session: Session, cart_id: int) -> list[CartItem]:
        stmt = select(CartItem).where(CartItem.cart_id == cart_id).order_by(CartItem.id)
        return list(session.exec(stmt).all())

    def get_item(self, session: Session, cart_id: int, book_id: int) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id, CartItem.book_id == book_id
        )
        return session.exec(stmt).first()

    def get_item_by_id(self, session: Session, item_id: int) -> CartItem | None:
        return session.get(CartItem, item_id)

    def save_item(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.flush()
        return item

    def delete_item(self, session: Session, item: CartItem) -> None:
        session.delete(item)

    def delete_items(self, session: Session, items: list[CartItem]) -> int:
        """
        Delete the given lines in one statement.

        Returns the number of rows actually deleted, which is lower than
        len(items) when another transaction removed some of them first.
        """
        ids = [item.id for item in items]
        if not ids:
            return 0
        stmt = (
            delete(CartItem)
            .where(CartItem.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        result = session.exec(stmt)
        return result.rowcount
