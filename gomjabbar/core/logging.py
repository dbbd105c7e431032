import logging
import sys

from pythonjsonlogger import jsonlogger


def setup_logging(level: str | int = logging.INFO, json_output: bool = True):
    """
    Configures root logging for eval runs.

    JSON lines go to stderr so that stdout stays free for the live status view
    and for `inspect` output. Transport libraries are kept at WARNING.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Prevent duplicate logs by removing existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_handler = logging.StreamHandler(sys.stderr)
    if json_output:
        formatter = jsonlogger.JsonFormatter(
            fmt='%(asctime)s %(levelname)s %(name)s %(message)s',
            datefmt='%Y-%m-%dT%H:%M:%SZ'
        )
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_handler.setFormatter(formatter)
    root_logger.addHandler(log_handler)

    # Noise reduction for provider SDKs and transports
    for name in ("httpx", "httpcore", "openai", "anthropic", "boto3", "botocore", "langsmith"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
