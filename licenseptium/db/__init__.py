from licenseptium.db.base import Base
from licenseptium.db.schema import create_tables
from licenseptium.db.session import build_engine, build_sessionmaker

__all__ = ["Base", "build_engine", "build_sessionmaker", "create_tables"]
