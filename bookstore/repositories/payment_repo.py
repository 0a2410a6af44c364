# bookstore/repositories/payment_repo.py
from sqlmodel import Session, select

from bookstore.models.order import Payment


class PaymentRepository:
    """
    Data access layer for payments. No commits here.

    Lock order: callers lock the owning order first, then its payments.
    """

    def get_by_id(self, session: Session, payment_id: int) -> Payment | None:
        return session.get(Payment, payment_id)

    def get_for_update(self, session: Session, payment_id: int) -> Payment | None:
        stmt = (
            select(Payment)
            .where(Payment.id == payment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return session.exec(stmt).first()

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
        method: str | None = None,
    ) -> list[Payment]:
        stmt = select(Payment)
        if status is not None:
            stmt = stmt.where(Payment.payment_status == status)
        if method is not None:
            stmt = stmt.where(Payment.payment_method == method)
        stmt = (
            stmt.order_by(Payment.created_at.desc(), Payment.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def list_for_order(self, session: Session, order_id: int) -> list[Payment]:
        stmt = (
            select(Payment)
            .where(Payment.order_id == order_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
        )
        return list(session.exec(stmt).all())

    def list_for_order_for_update(self, session: Session, order_id: int) -> list[Payment]:
        stmt = (
            select(Payment)
            .where(Payment.order_id == order_id)
            .order_by(Payment.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, payment: Payment) -> Payment:
        session.add(payment)
        session.flush()  # Assign PK
        return payment

    def update(self, session: Session, payment: Payment) -> Payment:
        session.add(payment)
        session.flush()
        return payment
