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
configuration settings of mfaotp

The library functions never consult these settings on their own: all
token engines get their parameters explicitly from the caller. The
settings provide the defaults for the `mfaotp` command line and for
applications which want to read the Yubico credentials and the logging
setup from the environment.

Every setting `FOO` is read from the environment variable `MFAOTP_FOO`.
"""

import json
import os
from dataclasses import dataclass
from typing import Any, Callable, Type

from mfaotp.lib.type_utils import parse_timeout

ENV_PREFIX = "MFAOTP_"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

DEFAULT_YUBICO_URL = "https://api.yubico.com/wsapi/2.0/verify"


# The `check_*` functions are factory functions; they are used in
# `ConfigItem` definitions to create the functions that do the actual
# checking. The returned function's doc string contains a summary of
# what the function does, which is shown by `mfaotp config explain`.


class MfaOtpConfigKeyError(KeyError):
    """Used for configuration items with invalid names."""

    pass


class MfaOtpConfigValueError(ValueError):
    """Used for out-of-range errors etc. with configuration items."""

    pass


def check_int_in_range(min=None, max=None):
    """Factory function that will return a function that ensures that `min
    <= value <= max`. If `min` or `max` are not given, the practically
    default to “negative infinity” and “positive infinity”,
    respectively.
    """

    def f(key, value):
        result = int(value)  # Raises an exception if `value` is not an `int`
        if min is not None and result < min:
            raise MfaOtpConfigValueError(
                f"{key} is {result} but must be at least {min}"
            )
        if max is not None and result > max:
            raise MfaOtpConfigValueError(
                f"{key} is {result} but must be at most {max}"
            )

    if min is None and max is not None:
        f.__doc__ = f"value <= {max}"
    elif min is not None and max is None:
        f.__doc__ = f"value >= {min}"
    elif min is not None and max is not None:
        f.__doc__ = f"{min} <= value <= {max}"
    return f


def check_membership(allowed={}):
    """Factory function that will return a function that ensures that
    `value` is contained in `allowed` (the set of allowed values).
    """
    allowed_values = ", ".join(repr(s) for s in sorted(allowed))

    def f(key, value):
        if value not in allowed:
            raise MfaOtpConfigValueError(
                f"{key} is {value} but must be one of {allowed_values}."
            )

    f.__doc__ = f"value in {{{allowed_values}}}"
    return f


def check_timeout():
    """Factory function that will return a function that ensures that a
    timeout is positive, either as single value or as a tuple of
    connection and response timeout.
    """

    def f(key, value):
        values = value if isinstance(value, tuple) else (value,)
        if any(v <= 0 for v in values):
            raise MfaOtpConfigValueError(
                f"{key} is {value} but timeouts must be positive"
            )

    f.__doc__ = "value > 0 or 'connect,read' with both > 0"
    return f


def check_http_url():
    """Factory function that will return a function that ensures that
    `value` is a http or https url.
    """

    def f(key, value):
        if not value.startswith(("http://", "https://")):
            raise MfaOtpConfigValueError(
                f"{key} must be a http(s) url but is {value!r}"
            )

    f.__doc__ = "value is a http(s) url"
    return f


@dataclass
class ConfigItem:
    """This class represents individual configuration settings. A
    `ConfigSchema` is basically a dictionary of `ConfigItem` instances.
    """

    name: str  # Name of the item
    type: Type = str  # Type of the item
    convert: Callable[[str], Any] = None  # Converts strings to type
    validate: Callable[[str, Any], None] = None  # Checks if value is valid
    default: Any = None  # Default value of item
    help: str = ""  # Help message string
    secret: bool = False  # Never shown by `config show`


class ConfigSchema:
    """This class represents a complete schema of configuration settings."""

    def __init__(self, schema=None, refuse_unknown=False):
        """Start a `ConfigSchema` instance. The `schema` passed into the
        constructor should be an iterable even though we store the schema
        internally as a dictionary in order to be able to find individual
        items more efficiently. If `refuse_unknown` is `True`, any items
        that are not in the schema will not validate.
        """
        self.schema = {}
        if schema is not None:
            for s in schema:
                self.schema[s.name] = s
        self.refuse_unknown = refuse_unknown

    def find_item(self, key):
        """Returns the `ConfigItem` instance for the configuration item
        called `key` if it exists, otherwise `None`.
        """
        return self.schema.get(key, None)

    def check_item(self, key, value):
        """Converts a new value for a configuration item to the proper type
        (according to the `ConfigItem` data structure for the item) and
        also applies the validate function if one is defined for the item.
        We're only doing the type conversion if the type of the `value`
        parameter is `str`.
        """

        item = self.schema.get(key, None)
        if item is None:
            if self.refuse_unknown:
                raise MfaOtpConfigKeyError(
                    f"Unknown configuration item '{key}'"
                )
            return value
        if item.type != str and isinstance(value, str):
            try:
                value = (
                    item.convert(value)
                    if item.convert is not None
                    else item.type(value)
                )
            except ValueError as exx:
                raise MfaOtpConfigValueError(
                    f"{key} can not be converted: {exx}"
                )
        if item.validate is not None:
            item.validate(key, value)
        return value

    def as_dict(self):
        """Return the names and default values of the schema as a
        dictionary.
        """
        return dict(
            (item.name, item.default) for item in self.schema.values()
        )

    def items(self):
        return self.schema.items()


_config_schema = ConfigSchema(
    [
        ConfigItem(
            "YUBICO_URL",
            str,
            validate=check_http_url(),
            default=DEFAULT_YUBICO_URL,
            help=(
                "The Yubico OTP validation service. The validation "
                "protocol 2.0 is used to talk to it."
            ),
        ),
        ConfigItem(
            "YUBICO_TIMEOUT",
            float,
            convert=parse_timeout,
            validate=check_timeout(),
            default=5.0,
            help=(
                "Timeout in seconds for the request to the validation "
                "service. Use 'connect,read' to give separate connection "
                "and response timeouts."
            ),
        ),
        ConfigItem(
            "YUBICO_CLIENT_ID",
            str,
            default="",
            help="The client id registered at the validation service.",
        ),
        ConfigItem(
            "YUBICO_API_KEY",
            str,
            default="",
            secret=True,
            help=(
                "The base64 encoded api key shared with the validation "
                "service. Requests and responses are signed with it."
            ),
        ),
        ConfigItem(
            "SECRET",
            str,
            default="",
            secret=True,
            help=(
                "The base32 encoded secret used by the hotp and totp "
                "commands, if no `--secret` is given."
            ),
        ),
        ConfigItem(
            "LOG_LEVEL",
            str,
            validate=check_membership(VALID_LOG_LEVELS),
            default="WARNING",
            help=(
                "Messages will be logged only if they are at this level "
                "or above."
            ),
        ),
        ConfigItem(
            "LOG_CONSOLE_LEVEL",
            str,
            validate=check_membership(VALID_LOG_LEVELS),
            default="WARNING",
            help=(
                "Messages will be written to the console only if they "
                "are at this level or above."
            ),
        ),
        ConfigItem(
            "LOG_CONSOLE_LINE_FORMAT",
            str,
            default="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            help="Format for individual lines written to the console.",
        ),
        ConfigItem(
            "LOG_CONFIG",
            dict,
            convert=json.loads,
            default=None,
            help=(
                "You can completely redefine the logging setup by "
                "passing a configuration dictionary in `LOG_CONFIG`. The "
                "default value of `None` enables a basic setup based on "
                "the `LOG_*` parameters."
            ),
        ),
    ],
    refuse_unknown=True,
)


def get_config_schema() -> ConfigSchema:
    return _config_schema


def load_config(environ=None, **overrides) -> dict:
    """
    build the settings dictionary from the schema defaults, the
    `MFAOTP_*` environment variables and the explicit overrides

    :param environ: mapping to read the variables from, default os.environ
    :param overrides: setting values, which take precedence
    :return: dict with converted and validated values
    """

    if environ is None:
        environ = os.environ

    config = _config_schema.as_dict()

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX) :]
        config[name] = _config_schema.check_item(name, value)

    for name, value in overrides.items():
        if value is None:
            continue
        config[name] = _config_schema.check_item(name, value)

    return config


# eof
