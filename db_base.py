from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all ORM models (jobs, categories, grading/sanitisation
    records, users).

    Kept free of engine/session imports so the seed script and test fixtures
    can create tables with a plain sync engine.
    """
    pass
