"""SQLite schema and engine setup (SQLAlchemy Core)."""
