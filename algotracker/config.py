import os
from dotenv import load_dotenv

load_dotenv()

# --- Database ---
# Default file used when the caller does not pass a path to init_db()
DATABASE_PATH = os.getenv("ALGOTRACKER_DB_PATH", "./data/algotracker.db")
SQL_ECHO = os.getenv("ALGOTRACKER_SQL_ECHO", "false").lower() in ("1", "true", "yes")

# --- Logging ---
LOG_LEVEL = os.getenv("ALGOTRACKER_LOG_LEVEL", "INFO").upper()
