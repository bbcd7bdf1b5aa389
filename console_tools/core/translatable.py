"""Registry of models whose columns are translated per locale.

A model takes part in translation conversion by mixing in
:class:`TranslatableMixin`, listing its translatable columns in
``__translatable__`` and being registered with :data:`registry`::

    @registry.register
    class Category(TranslatableMixin, db.Model):
        __tablename__ = "categories"
        __translatable__ = ("name", "description")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple, Type

from console_tools.core.naming import studly
from console_tools.errors import NotFoundError


class TranslatableMixin:
    """Declares the columns whose values are stored per locale."""

    __translatable__: Tuple[str, ...] = ()

    @classmethod
    def translatable_columns(cls) -> List[str]:
        """Return the translatable column names in declaration order."""
        return list(cls.__translatable__)


@dataclass(frozen=True)
class TranslatableEntity:
    """Everything the converter needs to know about one entity type."""

    name: str
    table_name: str
    columns: Tuple[str, ...]
    model: Type


class TranslatableRegistry:
    """Maps entity type names to their table and translatable columns."""

    def __init__(self):
        self._entities: Dict[str, TranslatableEntity] = {}

    def register(self, model: Type) -> Type:
        """Register a model class. Usable as a class decorator."""
        columns = tuple(model.translatable_columns())
        if not columns:
            raise ValueError(f"{model.__name__} declares no translatable columns")

        self._entities[model.__name__] = TranslatableEntity(
            name=model.__name__,
            table_name=model.__tablename__,
            columns=columns,
            model=model,
        )
        return model

    def resolve(self, name: str) -> TranslatableEntity:
        """Look up an entity by name (``category``, ``Category``, ``blog_post``).

        Raises:
            NotFoundError: If no entity of that name is registered
        """
        entity = self._entities.get(studly(name))
        if entity is None:
            raise NotFoundError(f"Model {studly(name)} does not exist.")
        return entity

    def names(self) -> List[str]:
        return sorted(self._entities)


registry = TranslatableRegistry()
