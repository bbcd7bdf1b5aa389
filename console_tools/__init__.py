"""Console tools for the application.

This package provides CLI tools for:
- Exporting table data to seeder modules and replaying them
- Converting key/value translations into JSON columns
- Scaffolding and running add-column migrations
- Database dumps and cache clearing
"""

__version__ = "1.0.0"
