# reset_db.py
import asyncio
from shared.db import provider, Base
import services.school_directory.models


async def reset_db():
    engine = await provider.acquire()
    async with engine.begin() as conn:
        print("🗑️  Dropping tables...")
        await conn.run_sync(Base.metadata.drop_all)
        print("🔧 Creating tables...")
        await conn.run_sync(Base.metadata.create_all)
    await provider.release()
    print("✅ Database reset.")

if __name__ == "__main__":
    asyncio.run(reset_db())
