import logging


def configure_logging(level: str = "INFO"):
    """Configure root logging once for the API process"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
