"""Infrastructure layer — SQLite storage, session, synchronization.

This layer depends on stdlib, SQLAlchemy, and the domain models.
It must never import from services, commands, or output.
"""
