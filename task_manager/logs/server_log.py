import logging
import sys
import os
from pathlib import Path

# Log files live next to this module unless LOG_DIR points elsewhere
log_dir = Path(os.getenv("LOG_DIR") or Path(__file__).parent)
log_dir.mkdir(parents=True, exist_ok=True)

# File + console logging for request lines and server events
def setup_logging():
    logger = logging.getLogger("api_logger")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    # Re-imports must not stack handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')

    file_handler = logging.FileHandler(log_dir / "api_requests.log", encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger

api_logger = setup_logging()
