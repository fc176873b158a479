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
Pytest fixtures for the mfaotp unit tests
"""

import base64
import logging

import pytest
from click.testing import CliRunner
from mock import MagicMock

from mfaotp.lib.secret import Secret
from mfaotp.tokens.yubicotoken import (
    YubicoConfig,
    construct_param_string,
    generate_signature,
)

RFC_SEED = b"12345678901234567890"

YUBICO_API_KEY = base64.b64encode(b"mfaotp-yubico-apikey").decode()

YUBICO_OTP = "vvgnkjjhndihvdcfnrlrdvnjfrhjkkgbhubfbldjtbkk"


def signed_response_text(params, api_key=YUBICO_API_KEY, signature=None):
    """
    build the CRLF separated answer of the validation service with the
    signature 'h' over the given parameters
    """

    if signature is None:
        signature = generate_signature(
            construct_param_string(params), api_key
        )

    lines = ["h=%s" % signature]
    lines.extend("%s=%s" % (key, val) for key, val in params.items())

    return "\r\n".join(lines) + "\r\n\r\n"


def fake_response(text="", status_code=200, reason="OK", url=None):
    response = MagicMock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.reason = reason
    response.text = text
    response.url = url or "https://api.yubico.com/wsapi/2.0/verify"
    return response


def echo_service(status="OK", api_key=YUBICO_API_KEY, **extra):
    """
    create a side effect for requests.get, which answers like the
    validation service by echoing the nonce and the otp
    """

    def _get(url, params=None, timeout=None):
        answer = {
            "t": "2019-06-06T05:14:45Z0323",
            "otp": params["otp"],
            "nonce": params["nonce"],
            "sl": "25",
            "status": status,
        }
        answer.update(extra)
        return fake_response(signed_response_text(answer, api_key), url=url)

    return _get


@pytest.fixture
def rfc_secret():
    return Secret(RFC_SEED)


@pytest.fixture
def yubico_config():
    return YubicoConfig(client_id="1", api_key=YUBICO_API_KEY)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """
    remove the handlers `init_logging()` has set up, as they refer to the
    captured output streams of the test
    """

    yield

    logger = logging.getLogger("mfaotp")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
