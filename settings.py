import os
from dotenv import load_dotenv

load_dotenv()

DEBUG: bool = os.getenv("DEBUG", "false").lower().strip() == "true"

LOG_FILE = os.getenv("LOG_FILE", "./vmcomm.log")

LOG_FILE_MODE = os.getenv("LOG_FILE_MODE", "a")


SSH_HOST = os.getenv("SSH_HOST", "127.0.0.1")

SSH_PORT = int(os.getenv("SSH_PORT", "2222"))

SSH_USERNAME = os.getenv("SSH_USERNAME", "vagrant")

SSH_PRIVATE_KEY_PATH = os.getenv(
    "SSH_PRIVATE_KEY_PATH", os.path.join("~", ".vagrant.d", "insecure_private_key")
)

SSH_FORWARD_AGENT: bool = os.getenv("SSH_FORWARD_AGENT", "false").lower().strip() == "true"

# seconds, per connection attempt
SSH_TIMEOUT = float(os.getenv("SSH_TIMEOUT", "30"))

SSH_MAX_TRIES = int(os.getenv("SSH_MAX_TRIES", "100"))

SSH_SHELL = os.getenv("SSH_SHELL", "bash")

SSH_SETTLE_DELAY = float(os.getenv("SSH_SETTLE_DELAY", "4"))

SSH_POLL_INTERVAL = float(os.getenv("SSH_POLL_INTERVAL", "0.05"))


DEFAULT_CLI_NAME = "vmcomm"

VERSION = "0.1.0"
