# bookstore/repositories/order_repo.py
from sqlmodel import Session, select

from bookstore.models.order import Order, OrderDetail


class OrderRepository:
    """
    Data access layer for orders and order_details.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for the unit of work.
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: int,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Order]:
        stmt = select(Order)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, order_id: int) -> Order | None:
        return session.get(Order, order_id)

    def get_for_update(self, session: Session, order_id: int) -> Order | None:
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return session.exec(stmt).first()

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        return order

    # ---- Order details ----

    def list_details(
        self,
        session: Session,
        order_id: int,
    ) -> list[OrderDetail]:
        stmt = (
            select(OrderDetail)
            .where(OrderDetail.order_id == order_id)
            .order_by(OrderDetail.id)
        )
        return list(session.exec(stmt).all())

    def create_details(
        self,
        session: Session,
        details: list[OrderDetail],
    ) -> list[OrderDetail]:
        session.add_all(details)
        session.flush()
        return details
