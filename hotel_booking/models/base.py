from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Tables are declared through the ORM but queried with Core statements over
    explicit connections, so transactions stay visible at the call site.
    """

    pass
