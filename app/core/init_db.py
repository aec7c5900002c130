"""
Database initialization script.
Creates all tables and optionally seeds a demo vet and pet owner.
"""

from sqlalchemy import inspect
from app.core.database import engine, Base, SessionLocal
from app.models.profile import ContactMethod, PetOwnerProfile, Profile, UserRole
import logging

logger = logging.getLogger(__name__)


def init_db():
    """
    Initialize the database by creating all tables.
    """
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully!")


def seed_initial_data():
    """
    Seed the database with one vet and one pet owner so the
    appointment and reminder flows can be exercised locally.
    """
    db = SessionLocal()

    try:
        existing_profiles = db.query(Profile).count()

        if existing_profiles == 0:
            logger.info("No profiles found. Creating demo vet and pet owner...")

            vet = Profile(
                full_name="Dr. Demo Vet",
                email="vet@example.com",
                phone="+15550000001",
                role=UserRole.VET,
            )
            owner = Profile(
                full_name="Demo Owner",
                email="owner@example.com",
                phone="+15550000002",
                role=UserRole.PET_OWNER,
            )
            db.add_all([vet, owner])
            db.flush()

            db.add(PetOwnerProfile(id=owner.id, preferred_contact_method=ContactMethod.BOTH.value))
            db.commit()

            logger.info(f"Demo vet created: {vet.id}")
            logger.info(f"Demo pet owner created: {owner.id} (contact: both)")
        else:
            logger.info(f"Database already has {existing_profiles} profile(s). Skipping seed data.")

    except Exception as e:
        logger.error(f"Error seeding initial data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def check_tables():
    """
    Check which tables exist in the database.
    """
    inspector = inspect(engine)
    tables = inspector.get_table_names()

    logger.info("Existing tables in database:")
    for table in tables:
        logger.info(f"  - {table}")

    return tables


if __name__ == "__main__":
    import app.models  # noqa: F401

    logging.basicConfig(level=logging.INFO)

    logger.info("=" * 50)
    logger.info("Database Initialization Script")
    logger.info("=" * 50)

    check_tables()
    init_db()
    seed_initial_data()
    check_tables()

    logger.info("=" * 50)
    logger.info("Database initialization complete!")
    logger.info("=" * 50)
