"""Industrial IoT Monitor — Base Service Interface.

Implements the Service Repository pattern to decouple business logic
from API routes. Record services inherit from this base class.

Features:
    - Generic CRUD operations (get, create, update, delete)
    - Automatic logging with context
    - Domain exceptions instead of raw database errors

Usage:
    class MachineService(BaseService[Machine, MachineCreate, MachineUpdate]):
        def __init__(self, db: AsyncSession):
            super().__init__(Machine, db)
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ResourceConflict, ResourceNotFound
from logger import get_logger

ModelType = TypeVar("ModelType")
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

logger = get_logger(__name__)


class BaseService(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Base class for record services.

    Provides standard CRUD operations over one ORM model.
    API routes should use these services instead of raw DB usage.
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        """Initialize service with model class and database session.

        Args:
            model: The SQLAlchemy model class.
            db: The async database session.
        """
        self.model = model
        self.db = db
        self.logger = logger.bind(service=self.__class__.__name__)

    async def get(self, id: Any) -> ModelType | None:
        """Get a single record by primary key."""
        return await self.db.get(self.model, id)

    async def get_multi(self) -> list[ModelType]:
        """Get every record in natural storage order."""
        result = await self.db.execute(select(self.model))
        return list(result.scalars().all())

    async def get_or_404(self, id: Any) -> ModelType:
        """Get record or raise ResourceNotFound."""
        obj = await self.get(id)
        if obj is None:
            raise ResourceNotFound(self.model.__name__, id)
        return obj

    async def create(self, obj_in: CreateSchemaType) -> ModelType:
        """Create a new record.

        Raises:
            ResourceConflict: If the record violates a storage constraint.
        """
        obj_in_data = obj_in.model_dump(mode="json")
        db_obj = self.model(**obj_in_data)  # type: ignore[call-arg]

        self.db.add(db_obj)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            self.logger.warning(
                "Create failed - integrity error",
                id=str(obj_in_data.get("id")),
                model=self.model.__name__,
            )
            raise ResourceConflict(self.model.__name__, "already exists or violates constraints") from e

        await self.db.refresh(db_obj)
        self.logger.info(
            "Created new record",
            id=str(getattr(db_obj, "id", None)),
            model=self.model.__name__,
        )
        return db_obj

    async def update(
        self,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | dict[str, Any],
    ) -> ModelType:
        """Update an existing record in place."""
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(mode="json")

        for field, value in update_data.items():
            if field != "id" and hasattr(db_obj, field):
                setattr(db_obj, field, value)

        self.db.add(db_obj)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ResourceConflict(self.model.__name__, "update violated constraints") from e

        await self.db.refresh(db_obj)
        self.logger.info(
            "Updated record",
            id=str(getattr(db_obj, "id", None)),
            changes=sorted(update_data.keys()),
        )
        return db_obj

    async def delete(self, id: Any) -> ModelType:
        """Delete a record by primary key.

        Raises:
            ResourceNotFound: If no record has this key.
        """
        obj = await self.get_or_404(id)

        await self.db.delete(obj)
        await self.db.commit()

        self.logger.info(
            "Deleted record",
            id=str(id),
            model=self.model.__name__,
        )
        return obj
