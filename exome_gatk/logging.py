import logging

import colorlog

handler = colorlog.StreamHandler()
handler.setFormatter(
    colorlog.ColoredFormatter(
        "%(log_color)s%(levelname)s:%(name)s:%(message)s"
    )
)

RUN_LOG_FORMAT = "%(asctime)s %(message)s"


def get_logger(name):
    """Return a logger with a colorlog handler."""
    logger = colorlog.getLogger(name)
    logger.addHandler(handler)
    return logger


def add_run_log(logger_name: str, path) -> logging.FileHandler:
    """Append INFO records of `logger_name` and its children to `path`"""
    file_handler = logging.FileHandler(str(path), mode="a")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(
        logging.Formatter(RUN_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    logging.getLogger(logger_name).addHandler(file_handler)
    return file_handler


def remove_run_log(logger_name: str, file_handler: logging.FileHandler):
    logging.getLogger(logger_name).removeHandler(file_handler)
    file_handler.close()


def set_level(logger_name: str, loglevel: str):
    """Console output at `loglevel`; the run log always receives INFO"""
    handler.setLevel(loglevel)
    level = min(logging.getLevelName(loglevel), logging.INFO)
    logging.getLogger(logger_name).setLevel(level)
