from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings

DATABASE_URL = settings.DATABASE_URL

Base = declarative_base()


def build_engine(url: str, **kwargs):
	"""Create an engine for ``url``.

	SQLite needs ``check_same_thread=False`` because FastAPI runs sync
	handlers in a thread pool; file databases also get their parent directory
	created.
	"""
	parsed = make_url(url)
	if parsed.get_backend_name() == "sqlite":
		kwargs.setdefault("connect_args", {"check_same_thread": False})
		if parsed.database and parsed.database != ":memory:":
			Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
	else:
		kwargs.setdefault("pool_pre_ping", True)
	return create_engine(url, **kwargs)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(bind=None):
	"""Create database tables defined on Base subclasses.

	This is a convenience wrapper used on startup and in tests. In production
	you should run migrations (Alembic) instead of create_all.
	"""
	# models must be imported so their tables are registered on Base
	from . import models  # noqa: F401

	Base.metadata.create_all(bind=bind or engine)
