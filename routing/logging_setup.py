import logging


def setup_logging(level: str = "INFO"):
    """For entry points only; library modules just use logging.getLogger(__name__)."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    # keep per-request transport noise out of INFO output
    for logger_name in ["httpx", "httpcore"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
