import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from checkout.database import init_db
from checkout.errors import DuplicateOrder, StorageError, StorageWriteError
from checkout.models import Order
from checkout.schemas import OrderFields

logger = logging.getLogger(__name__)


class OrderStore:
    """Durable storage of completed orders.

    Orders are only ever appended. The unique constraint on ``session_id``
    guarantees at most one order per checkout session even when two
    deliveries of the same event race each other.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @classmethod
    def initialize(cls, database_url: str) -> "OrderStore":
        return cls(init_db(database_url))

    def insert_order(self, fields: OrderFields) -> int:
        db = self._session_factory()
        try:
            order = Order(**fields.model_dump())
            db.add(order)
            db.commit()
            return order.id
        except IntegrityError as exc:
            db.rollback()
            raise DuplicateOrder(fields.session_id) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Failed to store order for session %s: %s", fields.session_id, exc)
            raise StorageWriteError(f"Could not store order: {exc}") from exc
        finally:
            db.close()

    def find_by_external_reference(self, session_id: str) -> Order | None:
        try:
            with self._session_factory() as db:
                return db.query(Order).filter_by(session_id=session_id).first()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not look up order: {exc}") from exc

    def get_order(self, order_id: int) -> Order | None:
        with self._session_factory() as db:
            return db.get(Order, order_id)
