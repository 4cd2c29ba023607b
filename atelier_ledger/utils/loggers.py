import logging

from ..config import log_level


def get_logger(name="atelier_ledger"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(log_level())
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(ch)
    return logger
