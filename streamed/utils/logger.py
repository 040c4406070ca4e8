import logging


LOGGER_NAME = "streamed"
LOG_PREFIX = "[###STREAMEDLOG###] "

logger = logging.getLogger(LOGGER_NAME)


def streamlog(message, level=logging.INFO):
    logger.log(level, LOG_PREFIX + str(message))


def configure_logging(level=logging.INFO, handler=None):
    handler = handler or logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
