"""Identifier helpers for generated seeders and migrations.

Table and column names arrive in snake_case, kebab-case or camelCase and are
turned into class-style identifiers for the generated modules.

Example:
    "blog_posts" → "BlogPosts"
    "failed-jobs" → "FailedJobs"
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

TIMESTAMP_FORMAT = "%Y_%m_%d_%H%M%S"


def studly(value: str) -> str:
    """Convert a name to a capitalized camel identifier.

    Rules:
    - Split on underscores, dashes and whitespace
    - Upper-case the first letter of every word
    - Keep the remaining letters as they are

    Args:
        value: The name to convert

    Returns:
        The studly-cased identifier

    Examples:
        >>> studly("blog_posts")
        'BlogPosts'
        >>> studly("category")
        'Category'
        >>> studly("blogPost")
        'BlogPost'
        >>> studly("failed-jobs")
        'FailedJobs'
    """
    if not value:
        return ""

    words = re.split(r"[-_\s]+", value.strip())
    return "".join(word[:1].upper() + word[1:] for word in words if word)


def class_identifier(value: str) -> str:
    """Return the studly form of *value* as a valid class name.

    Characters not allowed in identifiers are dropped and a leading digit
    gets a ``Table`` prefix.

    Examples:
        >>> class_identifier("2fa_codes")
        'Table2faCodes'
        >>> class_identifier("order.items")
        'OrderItems'
    """
    name = "".join(studly(word) for word in re.split(r"[^0-9A-Za-z_]+", value))
    if not name or name[0].isdigit():
        name = f"Table{name}"
    return name


def seeder_class_name(table: str) -> str:
    """Return the seeder class (and file stem) for *table*."""
    return f"{class_identifier(table)}Seeder"


def migration_slug(table: str, column: str) -> str:
    """Return the descriptive part of an add-column migration name."""
    return f"add_{column}_to_{table}_table"


def migration_class_name(table: str, column: str) -> str:
    """Return the class name of an add-column migration.

    Examples:
        >>> migration_class_name("users", "age")
        'AddAgeToUsersTable'
    """
    return f"Add{class_identifier(column)}To{class_identifier(table)}Table"


def timestamp(now: Optional[datetime] = None) -> str:
    """Return a file-name timestamp, sortable down to the second.

    Examples:
        >>> timestamp(datetime(2024, 1, 2, 3, 4, 5))
        '2024_01_02_030405'
    """
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
