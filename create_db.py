# create_db.py
import asyncio
from shared.db import provider

# Import all models here so they are registered with SQLAlchemy's metadata
import services.school_directory.models


async def init_models():
    print("🔧 Creating tables...")
    await provider.acquire()
    await provider.release()
    print("✅ Tables created.")

if __name__ == "__main__":
    asyncio.run(init_models())
