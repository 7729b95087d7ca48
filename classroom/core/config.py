import os
from datetime import timedelta

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("CLASSROOM_DATABASE_URL", "sqlite:///./classroom.db")

# DEV ONLY default. Tokens are issued by the identity service with the same secret.
SECRET_KEY = os.getenv("CLASSROOM_SECRET_KEY", "change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE = timedelta(minutes=60)

# Submitted work moves to awaiting_correction once this much time has passed
AWAITING_CORRECTION_GRACE = timedelta(
    seconds=int(os.getenv("AWAITING_CORRECTION_GRACE_SECONDS", "60"))
)

DEFAULT_RETURN_NOTE = "Revision requested"

# Local AI inference server (Ollama-compatible)
OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama2")
OLLAMA_TIMEOUT = float(os.getenv("OLLAMA_TIMEOUT", "45"))
OLLAMA_MAX_RETRIES = 3
