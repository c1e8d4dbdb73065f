# campuschat/core/config.py
import os
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional
from dotenv import load_dotenv

# ================== ENV ==================

ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv(ROOT_DIR / ".env")

def env(*names: str, default: Optional[str] = None) -> str:
    for n in names:
        v = os.environ.get(n)
        if v is not None and str(v).strip() != "":
            return v
    if default is not None:
        return default
    raise KeyError(f"Missing required env var. Tried: {', '.join(names)}")

ENVIRONMENT = env("ENVIRONMENT", "APP_ENV", default="development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
FRONTEND_URL = env("FRONTEND_URL", default="http://localhost:5173").rstrip("/")

# ================== JWT ==================

JWT_SECRET = os.environ.get("JWT_SECRET", "default_secret_key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = int(os.environ.get("JWT_EXPIRATION_HOURS", "168"))
COOKIE_NAME = "token"

# ================== EMAIL ==================

RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "").strip()
EMAIL_FROM = env("EMAIL_FROM", "FROM_EMAIL", default="CampusChat <no-reply@campuschat.app>")
VERIFICATION_CODE_TTL_SECONDS = int(os.environ.get("VERIFICATION_CODE_TTL_SECONDS", "600"))
VERIFICATION_MAX_ATTEMPTS = int(os.environ.get("VERIFICATION_MAX_ATTEMPTS", "5"))
ALLOWED_EMAIL_SUFFIXES: List[str] = [
    s.strip().lower().lstrip(".")
    for s in env("ALLOWED_EMAIL_SUFFIXES", default="edu,ac.uk,edu.au,edu.in").split(",")
    if s.strip()
]

# ================== COINS ==================

SIGNUP_BONUS_COINS = int(os.environ.get("SIGNUP_BONUS_COINS", "10"))
ANON_TEXT_COST = int(os.environ.get("ANON_TEXT_COST", "2"))
ANON_IMAGE_COST = int(os.environ.get("ANON_IMAGE_COST", "4"))
USERNAME_CHANGE_COST = int(os.environ.get("USERNAME_CHANGE_COST", "70"))
LEDGER_RETRY_ATTEMPTS = int(os.environ.get("LEDGER_RETRY_ATTEMPTS", "3"))


def parse_price_table(raw: str) -> Dict[int, Decimal]:
    """Parse ``"20:200,50:400"`` into ``{20: Decimal("200"), 50: Decimal("400")}``."""
    table: Dict[int, Decimal] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        coins, _, price = item.partition(":")
        if not price:
            raise ValueError(f"Invalid price table entry: {item!r}")
        table[int(coins)] = Decimal(price.strip())
    return table


COIN_PRICE_TABLE = parse_price_table(env("COIN_PRICE_TABLE", default="20:200,50:400,100:700"))
COIN_CURRENCY = env("COIN_CURRENCY", default="NGN")

# ================== PAYSTACK ==================

PAYSTACK_SECRET_KEY = os.environ.get("PAYSTACK_SECRET_KEY", "").strip()
PAYSTACK_BASE_URL = env("PAYSTACK_BASE_URL", default="https://api.paystack.co").rstrip("/")
PAYSTACK_TIMEOUT_SECONDS = float(os.environ.get("PAYSTACK_TIMEOUT_SECONDS", "30"))

# ================== CHAT / UPLOADS ==================

CHAT_ROOM = "main_room"
CHAT_HISTORY_LIMIT = int(os.environ.get("CHAT_HISTORY_LIMIT", "50"))
UPLOAD_DIR = Path(env("UPLOAD_DIR", default=str(ROOT_DIR / "uploads")))
MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}

# ================== DATABASE ==================
# SQLite for local development, MySQL when configured

DATABASE_URL = os.environ.get("DATABASE_URL", "")

def get_database_url() -> str:
    """Get database URL - supports SQLite or MySQL."""
    if DATABASE_URL:
        return DATABASE_URL

    mysql_host = os.environ.get("MYSQL_HOST")
    if mysql_host:
        mysql_port = int(os.environ.get("MYSQL_PORT", "3306"))
        mysql_user = os.environ.get("MYSQL_USER", "root")
        mysql_password = os.environ.get("MYSQL_PASSWORD", "")
        mysql_db = os.environ.get("MYSQL_DB", "campuschat")
        return f"mysql+aiomysql://{mysql_user}:{mysql_password}@{mysql_host}:{mysql_port}/{mysql_db}?charset=utf8mb4"

    db_path = ROOT_DIR / "campuschat.db"
    return f"sqlite+aiosqlite:///{db_path}"
