"""Create the inventory tables and seed the default categories"""
import sys
from pathlib import Path

# Add parent directory to path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Load environment variables before settings are read
from dotenv import load_dotenv
load_dotenv(dotenv_path=project_dir / '.env')

from app.core.config import settings
from app.core.database import init_db
from app.core.logging_config import setup_logging

def main():
    setup_logging()
    init_db()
    print(f"Database initialized successfully at {settings.DATABASE_URL}")

if __name__ == "__main__":
    main()
