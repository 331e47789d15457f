# taskboard/config.py

import os

from dotenv import load_dotenv

# ================= ENV =================
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), ".env"))

# ---------------- DATABASE ----------------
# If DATABASE_URL is NOT provided -> use local SQLite
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskboard.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# ---------------- AUTH ----------------
SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY missing in .env!")

# ---------------- STORAGE ----------------
STORAGE_DIR = os.getenv("STORAGE_DIR", "./storage")
STORAGE_BUCKET = os.getenv("STORAGE_BUCKET", "task-attachments")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))  # 10 MB

# ---------------- MISC ----------------
DEFAULT_PROJECT_COLOR = os.getenv("DEFAULT_PROJECT_COLOR", "#f2766b")
FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
