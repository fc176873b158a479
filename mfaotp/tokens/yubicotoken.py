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

"""This file contains the Yubico validation client

The OTP of a YubiKey is forwarded to the Yubico validation service
(protocol version 2.0). The request is signed with the shared api key
and the signature of the response is verified with the same key, so a
forged or altered answer can be told apart from a rejected OTP:

    is_ok            - the service accepted the OTP
    signature_valid  - the answer was signed with the shared api key
    valid            - both of them
"""

import base64
import binascii
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import requests
from requests.exceptions import (
    ConnectionError,
    ConnectTimeout,
    ReadTimeout,
    Timeout,
    TooManyRedirects,
)

from mfaotp.lib.crypto.utils import compare, createNonce, hmac_digest
from mfaotp.lib.error import (
    DecodeError,
    ParameterError,
    RequestError,
    RequestTimeoutError,
)
from mfaotp.lib.logs import log_enter_exit
from mfaotp.lib.type_utils import parse_timeout
from mfaotp.settings import DEFAULT_YUBICO_URL

YUBICO_LEN_ID = 12

DEFAULT_TIMEOUT = 5.0

RESPONSE_FIELDS = ("h", "t", "otp", "nonce", "sl", "status")

log = logging.getLogger(__name__)


class ValidationStatus(str, enum.Enum):
    """
    the status values of the validation protocol, see
    https://developers.yubico.com/yubikey-val/Validation_Protocol_V2.0.html
    """

    OK = "OK"
    BAD_OTP = "BAD_OTP"
    REPLAYED_OTP = "REPLAYED_OTP"
    BAD_SIGNATURE = "BAD_SIGNATURE"
    MISSING_PARAMETER = "MISSING_PARAMETER"
    NO_SUCH_CLIENT = "NO_SUCH_CLIENT"
    OPERATION_NOT_ALLOWED = "OPERATION_NOT_ALLOWED"
    BACKEND_ERROR = "BACKEND_ERROR"
    NOT_ENOUGH_ANSWERS = "NOT_ENOUGH_ANSWERS"
    REPLAYED_REQUEST = "REPLAYED_REQUEST"


@dataclass(frozen=True)
class YubicoConfig:
    """
    :param client_id: the client id registered at the validation service
    :param api_key: the base64 encoded api key of the client
    :param service_url: the validation service
    :param signing_parameters: additional request parameters like
                               'timestamp', 'sl' or 'timeout', which are
                               signed along with the request
    """

    client_id: str
    api_key: str
    service_url: str = DEFAULT_YUBICO_URL
    signing_parameters: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.client_id is None or str(self.client_id) == "":
            raise ParameterError("Missing parameter: 'client_id'")
        if not self.api_key:
            raise ParameterError("Missing parameter: 'api_key'")
        if not self.service_url:
            object.__setattr__(self, "service_url", DEFAULT_YUBICO_URL)
        object.__setattr__(
            self, "signing_parameters", dict(self.signing_parameters or {})
        )

    def __repr__(self):
        return "YubicoConfig(client_id=%r, service_url=%r)" % (
            self.client_id,
            self.service_url,
        )


@dataclass
class ValidationResult:
    """
    the parsed answer of the validation service along with the outcome
    of the local checks
    """

    h: str | None
    t: datetime | None
    otp: str | None
    nonce: str | None
    sl: int | None
    status: ValidationStatus | str | None
    is_ok: bool
    device_id: str
    signature_valid: bool
    valid: bool
    nonce_valid: bool = False
    otp_valid: bool = False
    extra: dict[str, str] = field(default_factory=dict)


def construct_param_string(params: dict) -> str:
    """
    build the canonical string of the parameters, which is signed:
    all keys except 'h' in sorted order, joined as key=value with '&'

    :param params: the request or response parameters
    """

    return "&".join(
        "%s=%s" % (key, params[key]) for key in sorted(params) if key != "h"
    )


def decode_api_key(api_key: str) -> bytes:
    try:
        return base64.b64decode(api_key, validate=True)
    except binascii.Error as exx:
        raise DecodeError("The Yubico api key is not valid base64: %s" % exx)


def generate_signature(message: str, api_key: str) -> str:
    """
    sign the message with hmac-sha1 keyed by the base64 decoded api key

    :return: the base64 encoded signature
    """

    h_digest = hmac_digest(
        bkey=decode_api_key(api_key),
        data_input=message.encode("utf-8"),
        hash_algo="sha1",
    )

    return base64.b64encode(h_digest).decode()


def parse_response(data: str) -> dict[str, str]:
    """
    parse the key=value lines of the validation response

    the lines are separated by CRLF, a value may contain '=' itself (the
    base64 signature does). Unknown keys are preserved.
    """

    result = {}

    for line in data.split("\r\n"):
        if not line.strip():
            continue

        key, sep, value = line.partition("=")
        if not sep:
            log.warning("ignoring malformed response line %r", line)
            continue

        result[key.strip()] = value.strip()

    return result


def parse_timestamp(value: str | None) -> datetime | None:
    """
    parse the response timestamp like '2019-06-06T05:14:45Z0323' - the
    zone marker and the milliseconds after it are dropped
    """

    if not value:
        return None

    try:
        t = datetime.fromisoformat(value.split("Z")[0])
    except ValueError:
        log.warning("unable to parse response timestamp %r", value)
        return None

    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)

    return t


class YubicoValidator:
    """
    The Yubico validator forwards the OTP of a YubiKey to the validation
    service and verifies the signature of the answer.

    There is no retry or failover - the caller decides on the retry
    policy.
    """

    def __init__(self, config: YubicoConfig, session=None):
        """
        :param config: the client credentials and the service url
        :param session: optional requests.Session for connection reuse
        """

        self.config = config
        self.session = session

    def build_request(self, otp: str, nonce: str) -> dict[str, Any]:
        """
        create the signed request parameters

        :return: dict with the request parameters including signature 'h'
        """

        params = dict(self.config.signing_parameters)
        params.update(
            {"id": self.config.client_id, "nonce": nonce, "otp": otp}
        )

        message = construct_param_string(params)
        params["h"] = generate_signature(message, self.config.api_key)

        return params

    def validate(self, params: dict, timeout) -> dict[str, str]:
        """
        send the request to the validation service

        :raises RequestTimeoutError: if the service did not answer in time
        :raises RequestError: on connection errors and non-success status
        :return: the parsed response parameters
        """

        url = self.config.service_url
        get = self.session.get if self.session is not None else requests.get

        try:
            response = get(url, params=params, timeout=timeout)

        except (Timeout, ConnectTimeout, ReadTimeout) as exx:
            log.error("validation service %r timed out: %r", url, exx)
            raise RequestTimeoutError(
                "validation service %s did not answer within %r seconds"
                % (url, timeout),
                url=url,
            )

        except (ConnectionError, TooManyRedirects) as exx:
            log.error("validation service %r not available: %r", url, exx)
            raise RequestError(
                "validation service %s not available: %r" % (url, exx),
                url=url,
            )

        if not response.ok:
            log.info("Failed to validate yubico request %r", response)
            raise RequestError(
                "%s [%d]: %s"
                % (response.url, response.status_code, response.reason),
                url=response.url,
                status_code=response.status_code,
                reason=response.reason,
            )

        return parse_response(response.text)

    @log_enter_exit(log)
    def verify(self, otp, timeout=None) -> ValidationResult:
        """
        verify the OTP with the validation service

        :param otp: the YubiKey OTP (string or number)
        :param timeout: seconds or tuple of (connect, read) seconds
        :return: ValidationResult
        """

        otp = str(otp)

        if timeout is None:
            timeout = DEFAULT_TIMEOUT
        timeout = parse_timeout(timeout)

        nonce = createNonce()

        params = self.build_request(otp, nonce)

        result = self.validate(params, timeout)

        # ------------------------------------------------------------------ --

        # check the response signature

        signature = generate_signature(
            construct_param_string(result), self.config.api_key
        )
        signature_valid = compare(signature, result.get("h", ""))

        if not signature_valid:
            log.error(
                "The hash of the return from the Yubico validation server "
                "does not match the data!"
            )

        # the echoed nonce and otp are reported but are not part of 'valid'

        nonce_valid = compare(nonce, result.get("nonce", ""))
        if not nonce_valid:
            log.warning("The returned nonce does not match the sent nonce!")

        otp_valid = compare(otp, result.get("otp", ""))

        # ------------------------------------------------------------------ --

        status = result.get("status")
        try:
            status = ValidationStatus(status)
        except ValueError:
            log.warning("unknown validation status %r", status)

        sl = result.get("sl")
        if sl:
            try:
                sl = int(sl)
            except ValueError:
                log.warning("unable to parse sync level %r", sl)
                sl = None
        else:
            sl = None

        is_ok = status == ValidationStatus.OK

        if not is_ok:
            # possible results are listed here:
            # https://github.com/Yubico/yubikey-val/wiki/ValidationProtocolV20
            log.warning("[verify] failed with %r", status)

        return ValidationResult(
            h=result.get("h"),
            t=parse_timestamp(result.get("t")),
            otp=result.get("otp"),
            nonce=result.get("nonce"),
            sl=sl,
            status=status,
            is_ok=is_ok,
            device_id=otp[:YUBICO_LEN_ID],
            signature_valid=signature_valid,
            valid=is_ok and signature_valid,
            nonce_valid=nonce_valid,
            otp_valid=otp_valid,
            extra=dict(
                (key, val)
                for key, val in result.items()
                if key not in RESPONSE_FIELDS
            ),
        )


def verify(otp, config: YubicoConfig, timeout=None) -> ValidationResult:
    """
    Verifies a YubiKey OTP with the validation service

    :param otp: the YubiKey OTP
    :param config: the client credentials and the service url
    :param timeout: seconds or tuple of (connect, read) seconds
    """

    return YubicoValidator(config).verify(otp, timeout=timeout)


# eof
