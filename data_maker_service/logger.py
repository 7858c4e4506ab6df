import logging

logger = logging.getLogger("data_maker_service")
