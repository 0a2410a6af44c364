# tests/conftest.py
import os
from decimal import Decimal

# Settings require DATABASE_URL; the app engine is never used by the tests.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, select

from bookstore.database import build_engine, get_session
from bookstore.main import app
from bookstore.models.cart import Cart, CartItem
from bookstore.models.catalog import Book
from bookstore.models.order import Order, OrderDetail, Payment
from bookstore.models.user import User


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'bookstore.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(email="reader@example.com", role="user") -> User:
        user = User(email=email, full_name=email.split("@", 1)[0], role=role)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def make_book(session):
    def _make(title="Novel X", price="100000", quantity=5) -> Book:
        book = Book(title=title, price=Decimal(price), quantity=quantity)
        session.add(book)
        session.commit()
        session.refresh(book)
        return book

    return _make


@pytest.fixture
def fill_cart(session):
    """
    Put (book, quantity) lines straight into the user's cart,
    bypassing the cart endpoints' stock check.
    """

    def _fill(user: User, *lines: tuple[Book, int]) -> Cart:
        cart = session.exec(select(Cart).where(Cart.user_id == user.id)).first()
        if cart is None:
            cart = Cart(user_id=user.id)
            session.add(cart)
            session.commit()
            session.refresh(cart)
        for book, quantity in lines:
            session.add(CartItem(cart_id=cart.id, book_id=book.id, quantity=quantity))
        session.commit()
        return cart

    return _fill


@pytest.fixture
def checkout(client):
    def _checkout(user_id: int, method: str = "COD"):
        return client.post(
            "/api/orders/checkout",
            json={"userId": user_id, "paymentMethod": method},
        )

    return _checkout


@pytest.fixture
def confirm(client):
    def _confirm(payment_id: int, is_success: bool = True, transaction_id: str | None = None):
        body = {"paymentId": payment_id, "isSuccess": is_success}
        if transaction_id is not None:
            body["transactionId"] = transaction_id
        return client.post("/api/orders/confirm-payment", json=body)

    return _confirm


@pytest.fixture
def db(session):
    """
    Read helpers that always see what the API committed.
    """

    class _Db:
        def stock(self, book: Book) -> int:
            session.expire_all()
            return session.get(Book, book.id).quantity

        def cart_items(self, user: User) -> list[CartItem]:
            session.expire_all()
            stmt = select(CartItem).join(Cart, Cart.id == CartItem.cart_id).where(
                Cart.user_id == user.id
            )
            return list(session.exec(stmt).all())

        def orders(self) -> list[Order]:
            session.expire_all()
            return list(session.exec(select(Order)).all())

        def order(self, order_id: int) -> Order:
            session.expire_all()
            return session.get(Order, order_id)

        def details(self, order_id: int) -> list[OrderDetail]:
            session.expire_all()
            return list(
                session.exec(select(OrderDetail).where(OrderDetail.order_id == order_id)).all()
            )

        def payments(self, order_id: int | None = None) -> list[Payment]:
            session.expire_all()
            stmt = select(Payment)
            if order_id is not None:
                stmt = stmt.where(Payment.order_id == order_id)
            return list(session.exec(stmt).all())

    return _Db()
