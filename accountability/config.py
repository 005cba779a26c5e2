from dotenv import load_dotenv
import os

# Load variables from .env file
load_dotenv()

# Supabase connection
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# "supabase" or "memory"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "supabase").lower()

# Optimistic write retries before giving up with a server fault
WRITE_RETRY_LIMIT = int(os.getenv("WRITE_RETRY_LIMIT", "3"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

STREAK_WINDOW_DAYS = 30
TIME_SERIES_MONTHS = 6
