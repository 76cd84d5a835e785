from sqlalchemy.orm import Session
from typing import Generic, Type, TypeVar, Optional
from mealplannr.models.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Shared lookups and staged writes for one model.

    Writes only flush. The calling service owns the transaction and commits
    through ``database.unit_of_work``.
    """

    def __init__(self, model: Type[T], db: Session):
        self.model = model
        self.db = db

    def get(self, id: int) -> Optional[T]:
        return self.db.get(self.model, id)

    def exists(self, id: int) -> bool:
        return self.db.query(self.model).filter(self.model.id == id).count() > 0

    def add(self, obj: T) -> T:
        """Stage a new row; its id is available after the flush."""
        self.db.add(obj)
        self.db.flush()
        return obj

    def remove(self, obj: T) -> None:
        self.db.delete(obj)
        self.db.flush()
