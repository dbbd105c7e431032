import os

from dotenv import load_dotenv

# Durable log output
LOG_DIR = os.getenv("GOMJABBAR_LOG_DIR", "eval-out")

# Scheduling
MAX_CONCURRENCY = int(os.getenv("GOMJABBAR_MAX_CONCURRENCY", "3"))  # per provider
MAX_LOGS = 1000  # rolling log tail entries kept in memory

# Seconds; unset means a stalled backend holds its slot indefinitely
_timeout = os.getenv("GOMJABBAR_GENERATION_TIMEOUT")
GENERATION_TIMEOUT = float(_timeout) if _timeout else None

# Model defaults
DEFAULT_TEMPERATURE = 0.0
DEFAULT_MAX_TOKENS = 1024

# Provider endpoints
VLLM_URL = os.getenv("VLLM_URL", "http://localhost:8000/v1")
AWS_REGION = os.getenv("AWS_DEFAULT_REGION", "us-east-1")

ENV_FILE = ".env.evals.local"


def load_environment(path: str = ENV_FILE) -> bool:
    """Load provider credentials from a dotenv file without overriding the process environment."""
    return load_dotenv(path, override=False)


def get_log_level() -> str:
    return os.getenv("GOMJABBAR_LOG_LEVEL", "INFO").upper()
