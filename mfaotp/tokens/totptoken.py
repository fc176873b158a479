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
This file contains the TOTP engine (RFC 6238)

The time based token is the counter based token, where the counter is
derived from the time: counter = floor(unix time / period). There is no
state - the time is taken from the configuration or the clock.
"""

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union

from mfaotp.lib.apps import create_key_uri, create_qrcode_url
from mfaotp.lib.crypto.utils import DigestAlgorithm
from mfaotp.lib.error import ParameterError
from mfaotp.lib.secret import Secret
from mfaotp.tokens.hmactoken import (
    HOTP,
    HOTP_OPTIONS,
    HotpConfig,
    check_hotp_options,
    check_int_field,
    check_otp,
    check_token_fields,
    merge_options,
    to_int,
)

TOTP_OPTIONS = HOTP_OPTIONS + ("period", "timestamp")

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

log = logging.getLogger(__name__)


def time2counter(T0: Union[float, int], timeStepping: int) -> int:
    counter = int(T0 // timeStepping)
    return counter


def counter2time(counter, timeStepping):
    T0 = float(counter) * timeStepping
    return T0


def now() -> datetime:
    """
    Return the current time.

    This function is required for datetime mocking during testing.
    """
    return datetime.now(timezone.utc)


def to_datetime(timestamp) -> datetime | None:
    """
    convert the timestamp option into an aware datetime

    numbers are seconds since the epoch, naive datetimes are taken as
    utc and None stays None - which stands for 'now'.
    """

    if timestamp is None:
        return None

    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

    elif isinstance(timestamp, (int, float)) and not isinstance(
        timestamp, bool
    ):
        try:
            timestamp = datetime.fromtimestamp(timestamp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exx:
            raise ParameterError("invalid timestamp %r: %r" % (timestamp, exx))

    else:
        raise ParameterError("unsupported timestamp %r" % (timestamp,))

    if timestamp < UNIX_EPOCH:
        raise ParameterError("timestamp before the epoch: %r" % timestamp)

    return timestamp


@dataclass(frozen=True)
class TotpConfig:
    """
    the finalized configuration of a TOTP token

    `timestamp` None means 'now' - the time is resolved whenever the
    counter is derived. Any counter given when building the config is
    discarded, as the counter is always derived from the time.
    Invalid values are rejected on construction.
    """

    secret: Secret
    issuer: str = ""
    label: str = "TOTP Authenticator"
    algorithm: DigestAlgorithm = DigestAlgorithm.SHA1
    digits: int = 6
    window: int = 1
    period: int = 30
    timestamp: datetime | None = None

    def __post_init__(self):
        check_token_fields(self)

        period = check_int_field("period", self.period)
        if period <= 0:
            raise ParameterError("period must be positive: %r" % period)

        object.__setattr__(self, "timestamp", to_datetime(self.timestamp))

    @classmethod
    def build(cls, config=None, **options) -> "TotpConfig":
        """
        create a TotpConfig from a partial configuration

        :param config: None, a mapping or a TotpConfig with the options
        :param options: options, which take precedence over config
        :raises ParameterError: on unknown options or invalid values
        """

        if isinstance(config, cls) and not options:
            return config

        values = merge_options(config, options, TOTP_OPTIONS)

        # stomp over any supplied counter as we are time based
        values.pop("counter", None)

        return cls(
            period=to_int("period", values.get("period", 30)),
            timestamp=values.get("timestamp"),
            **check_hotp_options(values, "TOTP Authenticator"),
        )

    def resolve_time(self) -> datetime:
        return self.timestamp if self.timestamp is not None else now()

    @property
    def counter(self) -> int:
        seconds = (self.resolve_time() - UNIX_EPOCH).total_seconds()
        return time2counter(seconds, self.period)

    def to_hotp(self) -> HotpConfig:
        """the counter based configuration for the current time step"""

        return HotpConfig(
            secret=self.secret,
            issuer=self.issuer,
            label=self.label,
            algorithm=self.algorithm,
            digits=self.digits,
            counter=self.counter,
            window=self.window,
        )

    def replace(self, **changes) -> "TotpConfig":
        return dataclasses.replace(self, **changes)


class TOTP:
    """
    time based one time passwords

    the window is applied in steps of the period, so with window 1 the
    tokens of the previous and the next period are accepted as well.
    """

    token_type = "totp"

    @classmethod
    def generate(cls, config=None, **options) -> tuple[str, Secret]:
        """
        Generates a TOTP token using the supplied configuration values

        :return: tuple of the token and the secret it was generated with
        """

        _config = TotpConfig.build(config, **options)

        hotp_config = _config.to_hotp()

        log.debug(
            "generating totp for time step %d (period %d)",
            hotp_config.counter,
            _config.period,
        )

        return HOTP.generate(hotp_config)

    @classmethod
    def verify(cls, otp, config=None, **options) -> tuple[bool, int | None]:
        """
        Verifies a TOTP token using the supplied configuration values

        :return: tuple of match indicator and the offset in periods
        """

        _config = TotpConfig.build(config, **options)

        return check_otp(otp, _config.to_hotp())

    @classmethod
    def remaining_seconds(cls, config=None, **options) -> float:
        """seconds until the token of the current period expires"""

        _config = TotpConfig.build(config, **options)

        seconds = (_config.resolve_time() - UNIX_EPOCH).total_seconds()

        return _config.period - (seconds % _config.period)

    @classmethod
    def to_uri(cls, config=None, **options) -> str:
        """Returns the otpauth uri representation of the config"""

        _config = TotpConfig.build(config, **options)

        return create_key_uri(cls.token_type, _config, period=_config.period)

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
