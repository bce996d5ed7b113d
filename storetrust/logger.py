import logging, json, sys, time, os


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; messages are escaped, not templated in."""

    converter = time.gmtime  # Use UTC timestamps

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _level_from_env(default):
    value = logging.getLevelName(os.getenv("STORETRUST_LOG_LEVEL", "").upper())
    return value if isinstance(value, int) else default


def get_logger(name="storetrust", level=logging.INFO, to_file=None):
    """Structured logger for storetrust components.

    Records go to stderr; stdout is reserved for operator output.
    STORETRUST_LOG_LEVEL overrides ``level``.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level_from_env(level))

    if not logger.handlers:
        formatter = JsonLineFormatter()
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
