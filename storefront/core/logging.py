import logging

from storefront.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

def setup_logging(level: str = None):
    """Configure the root logger once for the whole process."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # The SDK's HTTP client is chatty at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)
