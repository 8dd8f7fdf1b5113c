"""Database initialization script."""
import asyncio
from sqlalchemy import select
from ticketdesk.config import get_settings
from ticketdesk.database import create_engine, create_session_factory, init_db
from ticketdesk.models import Company, Profile

DEMO_COMPANY = "Acme"
DEMO_EMAIL = "jane@acme.example.com"


async def init_database(seed: bool = True):
    """Create all tables and optionally seed a demo company and profile."""
    settings = get_settings()
    engine = create_engine(settings)

    print("Creating database tables...")
    await init_db(engine)
    print("Tables created successfully!")

    if seed:
        session_factory = create_session_factory(engine)
        async with session_factory() as db:
            result = await db.execute(select(Company).where(Company.name == DEMO_COMPANY))
            company = result.scalars().first()
            if not company:
                company = Company(name=DEMO_COMPANY)
                db.add(company)
                await db.flush()
                print(f"Company created: {DEMO_COMPANY}")

            result = await db.execute(select(Profile).where(Profile.email == DEMO_EMAIL))
            if not result.scalars().first():
                db.add(Profile(
                    first_name="Jane",
                    surname="Doe",
                    email=DEMO_EMAIL,
                    phone="0821234567",
                    company_id=company.id,
                ))
                print(f"Profile created: {DEMO_EMAIL}")
            else:
                print("Demo profile already exists.")
            await db.commit()

    await engine.dispose()
    print("Database initialization complete!")


if __name__ == "__main__":
    asyncio.run(init_database())
