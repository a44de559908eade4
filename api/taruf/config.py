import os

JWT_SECRET = os.getenv("JWT_SECRET", "")
CANDIDATE_TOKEN_TTL_MINUTES = int(os.getenv("CANDIDATE_TOKEN_TTL_MINUTES", str(10 * 24 * 60)))
ADMIN_TOKEN_TTL_MINUTES = int(os.getenv("ADMIN_TOKEN_TTL_MINUTES", str(10 * 24 * 60)))
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "")
ADMIN_BOOTSTRAP_EMAIL = os.getenv("ADMIN_BOOTSTRAP_EMAIL", "admin@taruf.local").strip().lower()
ADMIN_BOOTSTRAP_PASSWORD = os.getenv("ADMIN_BOOTSTRAP_PASSWORD", "")
DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

ROOM_CAPACITY = int(os.getenv("ROOM_CAPACITY", "10"))
MAX_SLOT_SEARCH = int(os.getenv("MAX_SLOT_SEARCH", "1000"))
TIMINGS_PLACEHOLDER = os.getenv("TIMINGS_PLACEHOLDER", "Wait to be Assign")
MAX_ROUND1_SELECTIONS = int(os.getenv("MAX_ROUND1_SELECTIONS", "5"))
CANDIDATE_PIN_LENGTH = 6

RL_CANDIDATE_LOGIN_LIMIT = int(os.getenv("RL_CANDIDATE_LOGIN_LIMIT", "20"))
RL_CANDIDATE_SET_PASSWORD_LIMIT = int(os.getenv("RL_CANDIDATE_SET_PASSWORD_LIMIT", "10"))
RL_ADMIN_LOGIN_LIMIT = int(os.getenv("RL_ADMIN_LOGIN_LIMIT", "20"))
RL_WINDOW_SECONDS = int(os.getenv("RL_WINDOW_SECONDS", "60"))
