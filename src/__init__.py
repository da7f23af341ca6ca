"""Package marker for the application.

This file intentionally contains no runtime logic. It allows the project to be
imported as a package (for ``python -m src.main`` execution and for tests).
Other modules obtain the database handle with
``from src.firestore_service import get_db``.
"""
