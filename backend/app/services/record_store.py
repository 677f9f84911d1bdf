"""
Record Store - table-addressed data access used by the browser and the editor.

Exposes the handful of operations the UI needs from the database: fetch a
collection (scoped to the signed-in user), create one record, create many,
update by id, and a guarded decrement of a numeric field. Writes flush but
never commit; callers group them with transaction().
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Type

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth import UserContext
from app.database import Base
from app.models import Client, InventoryItem, Invoice, InvoiceItem, Profile

logger = logging.getLogger(__name__)


TABLES: Dict[str, Type[Base]] = {
    "profiles": Profile,
    "clients": Client,
    "inventory_items": InventoryItem,
    "invoices": Invoice,
    "invoice_items": InvoiceItem,
}


class RecordStoreError(Exception):
    """Unknown table or field, or a record that does not exist"""


class RecordNotFoundError(RecordStoreError):
    pass


class InsufficientStockError(RecordStoreError):
    """A guarded decrement would have taken the field below zero"""

    def __init__(self, table: str, record_id: int, field: str, amount: int):
        self.table = table
        self.record_id = record_id
        self.field = field
        self.amount = amount
        super().__init__(f"Cannot decrement {table}.{field} of record {record_id} by {amount}")


def model_for(table: str) -> Type[Base]:
    model = TABLES.get(table)
    if model is None:
        raise RecordStoreError(f"Unknown table: {table}")
    return model


def row_to_dict(record: Base) -> Dict[str, Any]:
    """Plain column values of a mapped record"""
    return {column.name: getattr(record, column.name) for column in record.__table__.columns}


class RecordStore:
    """Session-bound access to the application tables"""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator["RecordStore"]:
        """Commit everything written inside the block, or roll all of it back"""
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def fetch_records(self, table: str, context: UserContext) -> List[Base]:
        """
        All records of a table visible to the given user.

        Anonymous callers see nothing. Clients and invoices are owned by a
        profile; invoice items inherit the owner of their invoice. Profiles
        and the inventory catalog are shared.
        """
        model = model_for(table)
        if not context.is_authenticated:
            return []

        query = self.db.query(model)
        if model is Client:
            query = query.filter(Client.user_id == context.user_id)
        elif model is Invoice:
            query = query.filter(Invoice.user_id == context.user_id)
        elif model is InvoiceItem:
            query = query.join(Invoice, InvoiceItem.invoice_id == Invoice.id).filter(
                Invoice.user_id == context.user_id
            )

        return query.order_by(model.id).all()

    def get_record(self, table: str, record_id: int) -> Base:
        model = model_for(table)
        record = self.db.get(model, record_id)
        if record is None:
            raise RecordNotFoundError(f"{table} record {record_id} not found")
        return record

    def create_record(self, table: str, values: Dict[str, Any]) -> Base:
        """Insert one record and return it with its generated id"""
        model = model_for(table)
        self._check_fields(model, values)
        record = model(**values)
        self.db.add(record)
        self.db.flush()
        logger.info(f"Created {table} record {record.id}")
        return record

    def create_records(self, table: str, rows: List[Dict[str, Any]]) -> List[Base]:
        """Batch insert"""
        model = model_for(table)
        records = []
        for values in rows:
            self._check_fields(model, values)
            records.append(model(**values))
        self.db.add_all(records)
        self.db.flush()
        logger.info(f"Created {len(records)} {table} records")
        return records

    def update_record(self, table: str, record_id: int, values: Dict[str, Any]) -> Base:
        model = model_for(table)
        self._check_fields(model, values)
        record = self.get_record(table, record_id)
        for key, value in values.items():
            setattr(record, key, value)
        self.db.flush()
        logger.info(f"Updated {table} record {record_id}: {sorted(values)}")
        return record

    def decrement_field(self, table: str, record_id: int, field: str, amount: int) -> None:
        """
        Subtract amount from a numeric field in a single conditional UPDATE.

        The row only changes while the field still holds at least amount, so
        two submissions racing for the same stock cannot both succeed.
        """
        model = model_for(table)
        self._check_fields(model, {field: None})
        column = getattr(model, field)

        try:
            result = self.db.execute(
                update(model)
                .where(model.id == record_id, column >= amount)
                .values({field: column - amount})
                .execution_options(synchronize_session="fetch")
            )
        except SQLAlchemyError:
            logger.error(f"Decrement of {table}.{field} on record {record_id} failed", exc_info=True)
            raise

        if result.rowcount == 0:
            if self.db.get(model, record_id) is None:
                raise RecordNotFoundError(f"{table} record {record_id} not found")
            raise InsufficientStockError(table, record_id, field, amount)

        logger.info(f"Decremented {table}.{field} on record {record_id} by {amount}")

    @staticmethod
    def _check_fields(model: Type[Base], values: Dict[str, Any]) -> None:
        columns = set(model.__table__.columns.keys())
        unknown = set(values) - columns
        if unknown:
            raise RecordStoreError(f"Unknown fields for {model.__tablename__}: {sorted(unknown)}")
