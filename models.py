"""SQLAlchemy models and the translatable-entity registrations."""

from __future__ import annotations

from console_tools.core.translatable import TranslatableMixin, registry
from extensions import db
from utils import utc_now

# ---------------------------------------------------------------------------
# Translations (key/value store, one row per locale)
# ---------------------------------------------------------------------------


class Translation(db.Model):
    """One locale's value for one column of one row of another table."""
    __tablename__ = "translations"

    id = db.Column(db.Integer, primary_key=True)
    table_name = db.Column(db.String(255), nullable=False)
    column_name = db.Column(db.String(255), nullable=False)
    foreign_key = db.Column(db.Integer, nullable=False)
    locale = db.Column(db.String(255), nullable=False)
    value = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        db.UniqueConstraint(
            "table_name", "column_name", "foreign_key", "locale",
            name="uq_translation",
        ),
    )


# ---------------------------------------------------------------------------
# Migration bookkeeping
# ---------------------------------------------------------------------------


class MigrationRecord(db.Model):
    __tablename__ = "migrations"

    id = db.Column(db.Integer, primary_key=True)
    migration = db.Column(db.String(255), nullable=False)
    batch = db.Column(db.Integer, nullable=False)


# ---------------------------------------------------------------------------
# Translatable content
# ---------------------------------------------------------------------------


@registry.register
class Category(TranslatableMixin, db.Model):
    __tablename__ = "categories"
    __translatable__ = ("name", "description")

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(255))
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utc_now)

    posts = db.relationship("Post", backref="category")


@registry.register
class Post(TranslatableMixin, db.Model):
    __tablename__ = "posts"
    __translatable__ = ("title", "excerpt", "body")

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"))
    slug = db.Column(db.String(120), unique=True, nullable=False)
    title = db.Column(db.String(255))
    excerpt = db.Column(db.Text)
    body = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2))
    is_published = db.Column(db.Boolean, default=False)
    published_at = db.Column(db.DateTime)
