import logging

logger = logging.getLogger("excdetail")
logger.setLevel(logging.INFO)
