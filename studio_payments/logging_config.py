import logging.config

from studio_payments.config import Settings


def configure_logging(settings: Settings) -> None:
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "{levelname} {asctime} {name} {process:d} {message}",
                "style": "{",
            },
            "simple": {
                "format": "{levelname} {name} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "verbose" if settings.log_level == "DEBUG" else "simple",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
        "loggers": {
            "studio_payments": {
                "handlers": ["console"],
                "level": settings.log_level,
                "propagate": False,
            },
            "stripe": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    })
