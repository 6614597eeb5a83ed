from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from ats_portal.core import config
DATABASE_URL = config.DATABASE_URL

# SQLite needs cross-thread access for FastAPI's threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
