from typing import Type, TypeVar
from pydantic import BaseModel
from sqlalchemy.orm import Session

ModelType = TypeVar('ModelType')


class BaseService:
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def create(self, db: Session, obj_in, **extra) -> ModelType:
        """
        Create a new record in the database

        Args:
            db: Database session
            obj_in: Either a SQLAlchemy model or a Pydantic schema
            extra: Column values not carried by the schema (e.g. owner_id)

        Returns:
            The created model instance
        """
        if isinstance(obj_in, BaseModel):
            db_obj = self.model(**obj_in.model_dump(), **extra)
        else:
            db_obj = obj_in

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(self, db: Session, db_obj: ModelType, obj_in: BaseModel) -> ModelType:
        for key, value in obj_in.model_dump(exclude_unset=True).items():
            setattr(db_obj, key, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj
