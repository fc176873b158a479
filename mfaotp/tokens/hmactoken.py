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
This file contains the HOTP engine (RFC 4226) and its configuration
"""

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from mfaotp.lib.apps import create_key_uri, create_qrcode_url
from mfaotp.lib.crypto.utils import (
    DigestAlgorithm,
    get_hashalgo_from_description,
)
from mfaotp.lib.error import ParameterError
from mfaotp.lib.HMAC import HmacOtp
from mfaotp.lib.secret import Secret

SUPPORTED_DIGITS = (6, 8)
MAX_COUNTER = 2**64 - 1

HOTP_OPTIONS = (
    "issuer",
    "label",
    "algorithm",
    "digits",
    "counter",
    "window",
    "secret",
)

log = logging.getLogger(__name__)


def merge_options(config, options: dict, allowed) -> dict:
    """
    merge a partial configuration with the keyword options

    the caller's mapping is never modified. Options with the value None
    are treated as not given.

    :param config: None, a mapping or a config dataclass instance
    :param options: keyword options, which take precedence over config
    :param allowed: the names of the recognized options
    :return: new dict with the given (not None) options
    """

    if config is None:
        values = {}
    elif dataclasses.is_dataclass(config) and not isinstance(config, type):
        values = dict(
            (field.name, getattr(config, field.name))
            for field in dataclasses.fields(config)
            if field.init
        )
    elif isinstance(config, Mapping):
        values = dict(config)
    else:
        raise ParameterError("unsupported configuration %r" % type(config))

    values.update(options)

    unknown = sorted(set(values) - set(allowed))
    if unknown:
        raise ParameterError("unknown configuration options: %s" % unknown)

    return dict((key, val) for key, val in values.items() if val is not None)


def to_int(name, value):
    if isinstance(value, bool):
        raise ParameterError("%s must be an integer, not %r" % (name, value))
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ParameterError("%s must be an integer, not %r" % (name, value))


def to_secret(secret) -> Secret:
    """
    resolve the secret option: a Secret is used as it is, a string is
    decoded as base32, bytes are wrapped and without a secret a random
    one is generated
    """

    if isinstance(secret, Secret):
        return secret

    if secret is None or isinstance(secret, (str, bytes, bytearray)):
        return Secret(secret)

    raise ParameterError("unsupported secret type %r" % type(secret))


def check_hotp_options(values: dict, default_label: str) -> dict:
    """
    fill in the defaults and convert the common hmac token options

    :raises ParameterError: on values, which can not be converted
    :return: dict with all the common options
    """

    return {
        "issuer": values.get("issuer", ""),
        "label": values.get("label") or default_label,
        "algorithm": get_hashalgo_from_description(values.get("algorithm")),
        "digits": to_int("digits", values.get("digits", 6)),
        "window": to_int("window", values.get("window", 1)),
        "secret": to_secret(values.get("secret")),
    }


def check_int_field(name, value):
    if not isinstance(value, int) or isinstance(value, bool):
        raise ParameterError("%s must be an integer, not %r" % (name, value))
    return value


def check_token_fields(config):
    """
    check the fields, which the hmac based token configurations share

    called from `__post_init__`, so every instance is checked no matter
    if it comes from `build()`, `replace()` or the plain constructor.
    The algorithm description is normalized to a DigestAlgorithm.

    :raises ParameterError: on values out of range
    """

    if not isinstance(config.secret, Secret):
        raise ParameterError(
            "secret must be a Secret, not %r" % type(config.secret)
        )

    digits = check_int_field("digits", config.digits)
    if digits not in SUPPORTED_DIGITS:
        raise ParameterError(
            "unsupported digits %r - must be one of %r"
            % (digits, SUPPORTED_DIGITS)
        )

    window = check_int_field("window", config.window)
    if window < 0:
        raise ParameterError("window must not be negative: %r" % window)

    if not isinstance(config.issuer, str) or not isinstance(
        config.label, str
    ):
        raise ParameterError("issuer and label must be strings")

    object.__setattr__(
        config, "algorithm", get_hashalgo_from_description(config.algorithm)
    )


@dataclass(frozen=True)
class HotpConfig:
    """
    the finalized configuration of a HOTP token

    instances are usually created with `HotpConfig.build()`, which fills
    in the defaults. Invalid values are rejected on construction.
    """

    secret: Secret
    issuer: str = ""
    label: str = "HOTP Authenticator"
    algorithm: DigestAlgorithm = DigestAlgorithm.SHA1
    digits: int = 6
    counter: int = 0
    window: int = 1

    def __post_init__(self):
        check_token_fields(self)

        counter = check_int_field("counter", self.counter)
        if not 0 <= counter <= MAX_COUNTER:
            raise ParameterError(
                "counter must be an unsigned 64 bit value: %r" % counter
            )

    @classmethod
    def build(cls, config=None, **options) -> "HotpConfig":
        """
        create a HotpConfig from a partial configuration

        :param config: None, a mapping or a HotpConfig with the options
        :param options: options, which take precedence over config
        :raises ParameterError: on unknown options or invalid values
        """

        if isinstance(config, cls) and not options:
            return config

        values = merge_options(config, options, HOTP_OPTIONS)

        return cls(
            counter=to_int("counter", values.get("counter", 0)),
            **check_hotp_options(values, "HOTP Authenticator"),
        )

    def replace(self, **changes) -> "HotpConfig":
        return dataclasses.replace(self, **changes)


def check_otp(otp, config: HotpConfig) -> tuple[bool, int | None]:
    """
    verify an otp against the counter window of the configuration

    :param otp: the otp as string or number - numbers are zero padded
    :param config: the finalized configuration
    :return: tuple of match indicator and the offset of the matching
             counter relative to config.counter
    """

    if isinstance(otp, int) and not isinstance(otp, bool):
        otp = str(otp).rjust(config.digits, "0")

    if not isinstance(otp, str) or len(otp) != config.digits:
        log.info(
            "otp length does not match the expected %d digits", config.digits
        )
        return False, None

    hmac_otp = HmacOtp(
        config.secret,
        counter=config.counter,
        digits=config.digits,
        algorithm=config.algorithm,
    )

    delta = hmac_otp.checkOtp(otp, config.window)

    if delta is None:
        log.info("no matching otp in window %d", config.window)
    else:
        log.debug("otp matched with counter offset %d", delta)

    return delta is not None, delta


class HOTP:
    """
    counter based one time passwords

    all methods accept either a HotpConfig, a mapping of options or the
    options as keywords. The caller is responsible for storing the secret
    and for incrementing the counter after each successful use.
    """

    token_type = "hotp"

    @classmethod
    def generate(cls, config=None, **options) -> tuple[str, Secret]:
        """
        Generates a HOTP token using the supplied configuration values

        :return: tuple of the token and the secret it was generated with
        """

        _config = HotpConfig.build(config, **options)

        hmac_otp = HmacOtp(
            _config.secret,
            counter=_config.counter,
            digits=_config.digits,
            algorithm=_config.algorithm,
        )

        return hmac_otp.generate(), _config.secret

    @classmethod
    def verify(cls, otp, config=None, **options) -> tuple[bool, int | None]:
        """
        Verifies a HOTP token using the supplied configuration values

        :return: tuple of match indicator and counter delta or None
        """

        return check_otp(otp, HotpConfig.build(config, **options))

    @classmethod
    def to_uri(cls, config=None, **options) -> str:
        """Returns the otpauth uri representation of the config"""

        _config = HotpConfig.build(config, **options)

        return create_key_uri(cls.token_type, _config, counter=_config.counter)

    @classmethod
    def to_qrcode_url(
        cls, config=None, width: int = 256, height: int = 256, **options
    ) -> str:
        """
        Returns a QR code URL that will provide a scalable QR code of the
        config
        """

        return create_qrcode_url(cls.to_uri(config, **options), width, height)


# eof
