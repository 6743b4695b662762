import logging
from typing import Iterable, List, Optional

from sqlalchemy import case, desc, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from hotel_orders.core.errors import DuplicateOrderCodeError, PersistenceError
from hotel_orders.domain.lifecycle import OrderStatus, PaymentStatus
from hotel_orders.domain.models import Order, utcnow
from hotel_orders.interfaces.IOrderRepository import IOrderRepository, UpdateResult

logger = logging.getLogger(__name__)


class PostgresOrderRepository(IOrderRepository):
    """
    Order store backed by SQLAlchemy. Works against PostgreSQL in production
    and SQLite in tests; uniqueness and transition guards live in the
    database (unique indexes and conditional UPDATEs), never in Python.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def add(self, order: Order) -> Order:
        session = self.session_factory()
        try:
            session.add(order)
            session.commit()
            session.refresh(order)
            _ = order.customer  # load the owner before the session closes
            return order
        except IntegrityError as e:
            session.rollback()
            if "order_code" in str(e.orig):
                raise DuplicateOrderCodeError(order.order_code) from e
            logger.error(f"❌ DB Integrity Error saving order: {e.orig}")
            raise PersistenceError("Could not save order", details=str(e.orig)) from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"❌ DB Error saving order: {e}")
            raise PersistenceError("Could not save order") from e
        finally:
            session.close()

    def get_by_id(self, order_id: int) -> Optional[Order]:
        return self._one(select(Order).where(Order.id == order_id))

    def get_by_code(self, order_code: str) -> Optional[Order]:
        return self._one(select(Order).where(Order.order_code == order_code))

    def get_by_payment_reference(self, reference: str) -> Optional[Order]:
        return self._one(select(Order).where(Order.payment_reference == reference))

    def list_for_customer(self, customer_id: int) -> List[Order]:
        session = self.session_factory()
        try:
            stmt = (
                select(Order)
                .where(Order.customer_id == customer_id)
                .order_by(desc(Order.created_at), desc(Order.id))
            )
            return list(session.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Read Error: {e}")
            raise PersistenceError("Could not read orders") from e
        finally:
            session.close()

    def attach_payment_reference(self, order_id: int, reference: str) -> bool:
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.payment_reference.is_(None))
            .values(payment_reference=reference, updated_at=utcnow())
        )
        return self._execute_update(stmt) > 0

    def mark_payment_succeeded(self, reference: str) -> UpdateResult:
        session = self.session_factory()
        try:
            now = utcnow()
            # Single conditional UPDATE: both the verify call and the webhook
            # land here, so duplicates and reordering converge on one state.
            transition = (
                update(Order)
                .where(
                    Order.payment_reference == reference,
                    Order.payment_status != PaymentStatus.SUCCESS.value,
                )
                .values(
                    payment_status=PaymentStatus.SUCCESS.value,
                    status=case(
                        (Order.status == OrderStatus.PENDING.value, OrderStatus.PAID.value),
                        else_=Order.status,
                    ),
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if session.execute(transition).rowcount:
                session.commit()
                return UpdateResult.APPLIED

            refresh = (
                update(Order)
                .where(Order.payment_reference == reference)
                .values(updated_at=now)
                .execution_options(synchronize_session=False)
            )
            refreshed = session.execute(refresh).rowcount
            session.commit()
            return UpdateResult.ALREADY_APPLIED if refreshed else UpdateResult.NOT_FOUND
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"❌ DB Error applying payment success for {reference}: {e}")
            raise PersistenceError("Could not update order payment status") from e
        finally:
            session.close()

    def mark_payment_failed(self, reference: str) -> UpdateResult:
        stmt = (
            update(Order)
            .where(
                Order.payment_reference == reference,
                Order.payment_status == PaymentStatus.PENDING.value,
            )
            .values(payment_status=PaymentStatus.FAILED.value, updated_at=utcnow())
        )
        if self._execute_update(stmt):
            return UpdateResult.APPLIED
        if self.get_by_payment_reference(reference) is None:
            return UpdateResult.NOT_FOUND
        return UpdateResult.SKIPPED

    def update_status(self, order_id: int, new_status: str, allowed_from: Iterable[str]) -> UpdateResult:
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status.in_(list(allowed_from)))
            .values(status=new_status, updated_at=utcnow())
        )
        if self._execute_update(stmt):
            return UpdateResult.APPLIED
        if self.get_by_id(order_id) is None:
            return UpdateResult.NOT_FOUND
        return UpdateResult.SKIPPED

    # --- helpers ---

    def _one(self, stmt) -> Optional[Order]:
        session = self.session_factory()
        try:
            return session.scalars(stmt).first()
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Read Error: {e}")
            raise PersistenceError("Could not read order") from e
        finally:
            session.close()

    def _execute_update(self, stmt) -> int:
        session = self.session_factory()
        try:
            rowcount = session.execute(stmt.execution_options(synchronize_session=False)).rowcount
            session.commit()
            return rowcount
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"❌ DB Error updating order: {e}")
            raise PersistenceError("Could not update order") from e
        finally:
            session.close()
