# bookstore/repositories/book_repo.py
from collections.abc import Iterable

from sqlmodel import Session, select

from bookstore.models.catalog import Author, Book, Category, Publisher


class BookRepository:
    """
    Data access layer for Book and its catalog metadata.

    - Pure DB operations (queries + in-session mutations).
    - No FastAPI, no business logic, no commits.
    """

    def get_by_id(self, session: Session, book_id: int) -> Book | None:
        return session.get(Book, book_id)

    def list(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        category_id: int | None = None,
    ) -> list[Book]:
        stmt = select(Book)
        if category_id is not None:
            stmt = stmt.where(Book.category_id == category_id)
        stmt = stmt.order_by(Book.id).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def get_many_for_update(
        self,
        session: Session,
        book_ids: Iterable[int],
    ) -> dict[int, Book]:
        """
        Load books by id with a row lock (SELECT ... FOR UPDATE).

        Rows are locked in id order so two workflows touching the same
        books cannot deadlock each other.
        """
        ids = sorted(set(book_ids))
        if not ids:
            return {}
        stmt = (
            select(Book)
            .where(Book.id.in_(ids))
            .order_by(Book.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {book.id: book for book in session.exec(stmt).all()}

    def adjust_stock(self, session: Session, book: Book, delta: int) -> Book:
        """
        Apply a stock delta in the current transaction.

        Callers must have checked that the result stays >= 0.
        """
        book.quantity += delta
        session.add(book)
        return book

    # ----- Metadata lookups (display only) -----

    def get_author(self, session: Session, author_id: int | None) -> Author | None:
        return session.get(Author, author_id) if author_id is not None else None

    def get_publisher(
        self, session: Session, publisher_id: int | None
    ) -> Publisher | None:
        return session.get(Publisher, publisher_id) if publisher_id is not None else None

    def get_category(
        self, session: Session, category_id: int | None
    ) -> Category | None:
        return session.get(Category, category_id) if category_id is not None else None

    def titles_for(self, session: Session, book_ids: Iterable[int]) -> dict[int, str]:
        ids = sorted(set(book_ids))
        if not ids:
            return {}
        stmt = select(Book.id, Book.title).where(Book.id.in_(ids))
        return {book_id: title for book_id, title in session.exec(stmt).all()}
