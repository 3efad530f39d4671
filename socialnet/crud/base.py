"""Generic CRUD base class for SQLAlchemy models."""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from socialnet.database import Base


ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
	"""Reusable CRUD helper for SQLAlchemy models.

	All methods operate on model instances and return database objects, not schemas.
	"""

	def __init__(self, model: Type[ModelType]):
		self.model = model

	# ----- Read -----
	def get(self, db: Session, id: Any) -> Optional[ModelType]:
		"""Get one record by primary key."""
		return db.get(self.model, id)

	def count(self, db: Session, *conditions) -> int:
		"""Count records matching optional SQL conditions."""
		stmt = select(func.count(self.model.id))
		if conditions:
			stmt = stmt.where(*conditions)
		return db.scalar(stmt) or 0

	def paginate(self, db: Session, stmt, *, skip: int, limit: int) -> Tuple[List[ModelType], int]:
		"""Run a select with offset/limit and return (items, total)."""
		total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
		items = list(db.scalars(stmt.offset(skip).limit(limit)).all())
		return items, total

	# ----- Create -----
	def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
		"""Create a new record from a Pydantic schema or dict."""
		obj_in_data: Dict[str, Any] = obj_in.model_dump(exclude_unset=True) if isinstance(obj_in, BaseModel) else dict(obj_in)
		db_obj = self.model(**obj_in_data)  # type: ignore[arg-type]
		try:
			db.add(db_obj)
			db.commit()
			db.refresh(db_obj)
		except Exception:
			db.rollback()
			raise
		return db_obj

	# ----- Update -----
	def update(
		self,
		db: Session,
		*,
		db_obj: ModelType,
		obj_in: Union[UpdateSchemaType, Dict[str, Any]],
	) -> ModelType:
		"""Update a record with fields from a Pydantic schema or dict."""
		update_data = obj_in.model_dump(exclude_unset=True) if isinstance(obj_in, BaseModel) else dict(obj_in)

		for field, value in update_data.items():
			if hasattr(db_obj, field):
				setattr(db_obj, field, value)

		try:
			db.add(db_obj)
			db.commit()
			db.refresh(db_obj)
		except Exception:
			db.rollback()
			raise
		return db_obj

	# ----- Delete -----
	def delete_where(self, db: Session, *conditions) -> int:
		"""Bulk hard delete matching rows in its own commit.

		Returns the number of deleted rows. Deleting nothing is not an error,
		so repeated calls are idempotent.
		"""
		try:
			result = db.execute(delete(self.model).where(*conditions))
			db.commit()
		except Exception:
			db.rollback()
			raise
		return result.rowcount or 0
