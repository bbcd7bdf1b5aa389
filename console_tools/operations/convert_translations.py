"""Convert per-locale translation rows into JSON columns.

Before conversion every translatable value lives in the ``translations``
table, one row per (table, column, row id, locale). Afterwards each
translatable column of the entity holds a JSON object keyed by locale::

    {"en": "Cat", "fr": "Chat"}
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from flask import current_app
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from console_tools.config import (
    VALUE_TOO_LONG_MYSQL_CODE,
    VALUE_TOO_LONG_SQLSTATE,
)
from console_tools.core.translatable import (
    TranslatableEntity,
    TranslatableRegistry,
    registry as default_registry,
)
from console_tools.errors import AlreadyConvertedError, StoreError, ValueTooLongError

logger = logging.getLogger(__name__)

_TOO_LONG_RE = re.compile(r"Data too long for column '([^']+)'")


@dataclass
class ConversionResult:
    """Result of a conversion run."""

    entity: str
    rows_converted: int
    languages: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def build_language_set(default_locale: str, translations: Sequence[Any]) -> List[str]:
    """Default locale first, then every other locale in discovery order."""
    languages = {default_locale: None}
    for record in translations:
        languages.setdefault(record.locale, None)
    return list(languages)


def index_translations(translations: Sequence[Any]) -> Dict[tuple, str]:
    """Key translation values by (column_name, foreign_key, locale)."""
    return {
        (record.column_name, record.foreign_key, record.locale): record.value
        for record in translations
    }


def pivot_value(
    index: Mapping[tuple, str], column: str, row_id: Any, languages: Sequence[str]
) -> Dict[str, str]:
    """Build the locale -> value map of one column of one row.

    Locales without a translation record map to an empty string, the default
    locale included.
    """
    data = {}
    for lang in languages:
        value = index.get((column, row_id, lang))
        data[lang] = value if value is not None else ""
    return data


def is_already_converted(value: Any, languages: Sequence[str]) -> bool:
    """True when *value* is a JSON object keyed by exactly *languages*."""
    if not isinstance(value, str):
        return False
    try:
        decoded = json.loads(value)
    except ValueError:
        return False
    return isinstance(decoded, dict) and set(decoded) == set(languages)


def classify_store_error(exc: Exception) -> Exception:
    """Map a database exception to ValueTooLongError or StoreError."""
    orig = getattr(exc, "orig", None) or exc
    message = str(orig)

    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    args = getattr(orig, "args", ())
    code = args[0] if args and isinstance(args[0], int) else None

    match = _TOO_LONG_RE.search(message)
    if (
        sqlstate == VALUE_TOO_LONG_SQLSTATE
        or code == VALUE_TOO_LONG_MYSQL_CODE
        or match
    ):
        return ValueTooLongError(match.group(1) if match else None)
    return StoreError(message)


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------


class TranslationConverter:
    """Rewrites the translatable columns of one entity type as JSON."""

    def __init__(
        self,
        default_locale: Optional[str] = None,
        registry: Optional[TranslatableRegistry] = None,
        session=None,
    ):
        # Falls back to the application's configured locale
        self.default_locale = default_locale or current_app.config["DEFAULT_LOCALE"]
        self.registry = registry or default_registry
        self.session = session or db.session

    def convert(self, entity_name: str) -> ConversionResult:
        """Convert every row of *entity_name* inside one transaction.

        Raises:
            NotFoundError: If the entity type is not registered
            AlreadyConvertedError: If the first row already holds JSON for
                exactly the current language set
            ValueTooLongError: If a JSON value does not fit its column
            StoreError: On any other database failure
        """
        entity = self.registry.resolve(entity_name)

        try:
            items = self._fetch_items(entity)
            translations = self._fetch_translations(entity)
            languages = build_language_set(self.default_locale, translations)

            self._check_not_converted(entity, items, languages)

            index = index_translations(translations)
            table = entity.model.__table__
            pk = list(table.primary_key.columns)[0]
            for item in items:
                row = {
                    column: json.dumps(
                        pivot_value(index, column, item[pk.name], languages),
                        ensure_ascii=False,
                    )
                    for column in entity.columns
                }
                self.session.execute(
                    update(table).where(pk == item[pk.name]).values(**row)
                )

            self.session.commit()
        except AlreadyConvertedError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Conversion of %s rolled back: %s", entity.name, exc)
            raise classify_store_error(exc) from exc
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "Converted %d %s rows to JSON (%s)",
            len(items), entity.name, ", ".join(languages),
        )
        return ConversionResult(
            entity=entity.name, rows_converted=len(items), languages=languages
        )

    def _fetch_items(self, entity: TranslatableEntity) -> List[Dict[str, Any]]:
        table = entity.model.__table__
        result = self.session.execute(select(table))
        return [dict(row) for row in result.mappings()]

    def _fetch_translations(self, entity: TranslatableEntity) -> List[Any]:
        from models import Translation

        return list(
            self.session.execute(
                select(Translation).where(
                    Translation.table_name == entity.table_name,
                    Translation.column_name.in_(entity.columns),
                ).order_by(Translation.id)
            ).scalars()
        )

    def _check_not_converted(
        self,
        entity: TranslatableEntity,
        items: List[Dict[str, Any]],
        languages: List[str],
    ) -> None:
        """Abort when the first row's first translatable column is converted."""
        if not items:
            return
        if is_already_converted(items[0].get(entity.columns[0]), languages):
            raise AlreadyConvertedError()
