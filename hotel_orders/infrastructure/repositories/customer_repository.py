import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from hotel_orders.core.errors import DuplicateEmailError, PersistenceError
from hotel_orders.domain.models import Customer
from hotel_orders.interfaces.ICustomerRepository import ICustomerRepository

logger = logging.getLogger(__name__)


class PostgresCustomerRepository(ICustomerRepository):

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_by_email(self, email: str) -> Optional[Customer]:
        session = self.session_factory()
        try:
            stmt = select(Customer).where(func.lower(Customer.email) == email.strip().lower())
            return session.scalars(stmt).first()
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Read Error: {e}")
            raise PersistenceError("Could not read customer") from e
        finally:
            session.close()

    def add(self, customer: Customer) -> Customer:
        session = self.session_factory()
        try:
            session.add(customer)
            session.commit()
            session.refresh(customer)
            return customer
        except IntegrityError as e:
            session.rollback()
            if "email" in str(e.orig):
                raise DuplicateEmailError(customer.email) from e
            logger.error(f"❌ DB Integrity Error saving customer: {e.orig}")
            raise PersistenceError("Could not save customer", details=str(e.orig)) from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"❌ DB Error saving customer: {e}")
            raise PersistenceError("Could not save customer") from e
        finally:
            session.close()
