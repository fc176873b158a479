#
#    LinOTP - the open source solution for two factor authentication
#    Copyright (C) 2010-2019 KeyIdentity GmbH
#    Copyright (C) 2019-     netgo software GmbH
#
#    This file is part of LinOTP server.
#
#    This program is free software: you can redistribute it and/or
#    modify it under the terms of the GNU Affero General Public
#    License, version 3, as published by the Free Software Foundation.
#
#    This program is distributed in the hope that it will be useful,
#    but WITHOUT ANY WARRANTY; without even the implied warranty of
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#    GNU Affero General Public License for more details.
#
#    You should have received a copy of the
#               GNU Affero General Public License
#    along with this program.  If not, see <http://www.gnu.org/licenses/>.
#
#
#    E-mail: info@linotp.de
#    Contact: www.linotp.org
#    Support: www.linotp.de
#

"""
logging setup and logging helpers
"""

import functools
import logging
from logging.config import dictConfig as logging_dictConfig

# parameter names, which are never written into the log
REDACTED_NAMES = ("secret", "api_key", "apiKey", "key", "config")


def init_logging(config: dict):
    """
    Sets up logging for mfaotp.

    :param config: settings dictionary as created by
                   `mfaotp.settings.load_config()`
    """

    log_config = config.get("LOG_CONFIG")

    if log_config is None:
        log_config = {
            "version": 1,
            "disable_existing_loggers": False,
            "handlers": {
                "console": {
                    "level": config["LOG_CONSOLE_LEVEL"],
                    "class": "logging.StreamHandler",
                    "formatter": "mfaotp_console",
                },
            },
            "formatters": {
                "mfaotp_console": {
                    "format": config["LOG_CONSOLE_LINE_FORMAT"],
                },
            },
            "loggers": {
                "mfaotp": {
                    "handlers": ["console"],
                    "level": config["LOG_LEVEL"],
                    "propagate": False,
                },
            },
        }

    logging_dictConfig(log_config)

    return logging.getLogger("mfaotp")


def _redact(kwargs):
    return dict(
        (key, "<redacted>" if key in REDACTED_NAMES else value)
        for key, value in kwargs.items()
    )


# ------------------------------------------------------------------------------

# function decorators

# ------------------------------------------------------------------------------


def log_enter_exit(logger):
    """
    A decorator that logs entry and exit points of the function it
    decorates. Keyword arguments are logged with the secrets redacted,
    positional arguments only by their count.

    :param logger: The logger object that should be used
    """

    enter_str = "Entered function %s"
    exit_str = "Exited function %s"

    def _inner(func):
        @functools.wraps(func)
        def log_and_call(*args, **kwargs):
            # --------------------------------------------------------------

            extra = {
                "type": "function_enter",
                "function_name": func.__name__,
                "function_args_count": len(args),
                "function_kwargs": _redact(kwargs),
            }

            logger.debug(enter_str, func.__name__, extra=extra)

            # --------------------------------------------------------------

            returnvalue = func(*args, **kwargs)

            # --------------------------------------------------------------

            extra = {
                "type": "function_exit",
                "function_name": func.__name__,
            }

            logger.debug(exit_str, func.__name__, extra=extra)

            # --------------------------------------------------------------

            return returnvalue

        return log_and_call

    return _inner


# eof
