import os

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

DATABASE_URI = os.environ.get("VOLARE_DATABASE_URI", "sqlite+aiosqlite:///volare.db")

engine = create_async_engine(DATABASE_URI)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
