"""
Database engine, session factory and schema bootstrap
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings
from app.core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORIES = [
    ("Electronics", "Electronic devices and components"),
    ("Clothing", "Apparel and fashion items"),
    ("Food & Beverages", "Consumable products"),
    ("Books", "Books and educational materials"),
    ("Home & Garden", "Household and garden supplies"),
    ("Sports", "Sports equipment and accessories"),
    ("Health & Beauty", "Health and beauty products"),
    ("Toys", "Toys and games"),
    ("Automotive", "Automotive parts and accessories"),
    ("Office Supplies", "Office and stationery supplies"),
]

def _connect_args(url: str) -> dict:
    # Sync endpoints run in a thread pool, so a SQLite connection may be used off its creating thread
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    """Yield one session per request and always close it"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def seed_categories(db) -> int:
    """Insert any missing default categories. Returns the number added."""
    from app.models.inventory import Category

    existing = {name for (name,) in db.query(Category.name).all()}
    added = 0
    for name, description in DEFAULT_CATEGORIES:
        if name not in existing:
            db.add(Category(name=name, description=description))
            added += 1
    db.commit()
    return added

def init_db(bind=None) -> None:
    """Create tables and seed the default categories"""
    # Register models on Base.metadata
    import app.models  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    db = SessionLocal(bind=bind)
    try:
        added = seed_categories(db)
        logger.info(f"Database initialized ({added} default categories added)")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
