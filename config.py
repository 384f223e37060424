import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent
INSTANCE_DIR = BASE_DIR / "instance"
DATABASE_PATH = Path(os.getenv("DATABASE_PATH", str(INSTANCE_DIR / "volunteers.db")))

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Person grouping for summaries: "exact" (name/email as stored) or
# "normalized" (trimmed and case-folded)
PERSON_KEY_POLICY = os.getenv("PERSON_KEY_POLICY", "exact")

# Mastersheet title block
REPORTING_TIME = os.getenv("REPORTING_TIME", "9:00 AM")
REPORTING_VENUE = os.getenv(
    "REPORTING_VENUE", "Marina Bay Sands Expo, Convention Centre (Hall AB)",
)
SERVICE_HOURS_NOTE = os.getenv(
    "SERVICE_HOURS_NOTE",
    "Note: Service Hours (5½ Hours) are to be rounded to nearest half hour. "
    "E.g.(5hrs and 20 min = 5.5 hours, 5 hours and 5 mins = 5 hours)",
)

# Ensure directories exist on import
INSTANCE_DIR.mkdir(exist_ok=True)
