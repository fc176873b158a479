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
unit tests for the Yubico validation client
"""

from datetime import datetime, timezone

import pytest
import requests
from mock import MagicMock, patch

from mfaotp.lib.error import (
    DecodeError,
    ParameterError,
    RequestError,
    RequestTimeoutError,
)
from mfaotp.tests.conftest import (
    YUBICO_API_KEY,
    YUBICO_OTP,
    echo_service,
    fake_response,
    signed_response_text,
)
from mfaotp.tokens.yubicotoken import (
    ValidationStatus,
    YubicoConfig,
    YubicoValidator,
    construct_param_string,
    generate_signature,
    parse_response,
    parse_timestamp,
    verify,
)


def test_construct_param_string():
    params = {"otp": "ccccccb", "id": "1", "nonce": "abc"}

    assert construct_param_string(params) == "id=1&nonce=abc&otp=ccccccb"


def test_construct_param_string_skips_signature():
    params = {"otp": "ccccccb", "h": "c2lnbmF0dXJl", "id": "1"}

    assert construct_param_string(params) == "id=1&otp=ccccccb"


def test_generate_signature():
    # RFC 2202 test case 2 - hmac-sha1 with key 'Jefe'
    api_key = "SmVmZQ=="

    signature = generate_signature("what do ya want for nothing?", api_key)

    assert signature == "7/zfauXrL6LSdBbV8YTfnCWafHk="


def test_invalid_api_key():
    with pytest.raises(DecodeError):
        generate_signature("id=1", "not base64!")


def test_parse_response():
    data = (
        "h=vjhFxZrNHB5CjI6vhuSeF2n46a8=\r\n"
        "t=2019-06-06T05:14:45Z0323\r\n"
        "otp=%s\r\n"
        "nonce=abc\r\n"
        "sl=100\r\n"
        "status=OK\r\n"
        "malformed line\r\n"
        "\r\n" % YUBICO_OTP
    )

    result = parse_response(data)

    assert result == {
        "h": "vjhFxZrNHB5CjI6vhuSeF2n46a8=",
        "t": "2019-06-06T05:14:45Z0323",
        "otp": YUBICO_OTP,
        "nonce": "abc",
        "sl": "100",
        "status": "OK",
    }


@pytest.mark.parametrize(
    "value,expected",
    [
        (
            "2019-06-06T05:14:45Z0323",
            datetime(2019, 6, 6, 5, 14, 45, tzinfo=timezone.utc),
        ),
        (
            "2019-06-06T05:14:45Z",
            datetime(2019, 6, 6, 5, 14, 45, tzinfo=timezone.utc),
        ),
        ("garbage", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value) == expected


class TestYubicoConfig:
    def test_defaults(self):
        config = YubicoConfig(client_id="1", api_key=YUBICO_API_KEY)

        assert config.service_url == "https://api.yubico.com/wsapi/2.0/verify"
        assert config.signing_parameters == {}

    @pytest.mark.parametrize(
        "client_id,api_key",
        [(None, YUBICO_API_KEY), ("", YUBICO_API_KEY), ("1", ""), ("1", None)],
    )
    def test_missing_credentials(self, client_id, api_key):
        with pytest.raises(ParameterError):
            YubicoConfig(client_id=client_id, api_key=api_key)

    def test_repr_hides_api_key(self):
        config = YubicoConfig(client_id="1", api_key=YUBICO_API_KEY)
        assert YUBICO_API_KEY not in repr(config)


class TestYubicoValidator:
    def test_build_request(self, yubico_config):
        validator = YubicoValidator(yubico_config)

        params = validator.build_request("ccccccb", "abc")

        assert params["id"] == "1"
        assert params["nonce"] == "abc"
        assert params["otp"] == "ccccccb"
        assert params["h"] == generate_signature(
            "id=1&nonce=abc&otp=ccccccb", YUBICO_API_KEY
        )

    def test_build_request_signing_parameters(self):
        config = YubicoConfig(
            client_id="1",
            api_key=YUBICO_API_KEY,
            signing_parameters={"timestamp": "1", "sl": "50"},
        )

        params = YubicoValidator(config).build_request("ccccccb", "abc")

        assert params["h"] == generate_signature(
            "id=1&nonce=abc&otp=ccccccb&sl=50&timestamp=1", YUBICO_API_KEY
        )

    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_ok(self, m_get, yubico_config):
        m_get.side_effect = echo_service(status="OK")

        result = verify(YUBICO_OTP, yubico_config)

        assert result.valid
        assert result.is_ok
        assert result.signature_valid
        assert result.nonce_valid
        assert result.otp_valid
        assert result.status == ValidationStatus.OK
        assert result.otp == YUBICO_OTP
        assert result.sl == 25
        assert result.device_id == YUBICO_OTP[:12]
        assert result.t == datetime(2019, 6, 6, 5, 14, 45, tzinfo=timezone.utc)
        assert result.extra == {}

        url = m_get.call_args.args[0]
        kwargs = m_get.call_args.kwargs
        assert url == "https://api.yubico.com/wsapi/2.0/verify"
        assert kwargs["timeout"] == 5.0

        params = kwargs["params"]
        assert params["id"] == "1"
        assert params["otp"] == YUBICO_OTP
        assert params["h"] == generate_signature(
            construct_param_string(params), YUBICO_API_KEY
        )

    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_bad_otp(self, m_get, yubico_config):
        m_get.side_effect = echo_service(status="BAD_OTP")

        result = verify(YUBICO_OTP, yubico_config)

        assert not result.valid
        assert not result.is_ok
        assert result.signature_valid
        assert result.status == ValidationStatus.BAD_OTP

    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_replayed(self, m_get, yubico_config):
        m_get.side_effect = echo_service(status="REPLAYED_OTP")

        result = verify(YUBICO_OTP, yubico_config)

        assert not result.valid
        assert result.status == ValidationStatus.REPLAYED_OTP

    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_forged_signature(self, m_get, yubico_config):
        # an OK answer signed with another key must not be valid
        other_key = "b3RoZXIga2V5"
        m_get.side_effect = echo_service(status="OK", api_key=other_key)

        result = verify(YUBICO_OTP, yubico_config)

        assert result.is_ok
        assert not result.signature_valid
        assert not result.valid

    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_unsigned_answer(self, m_get, yubico_config):
        m_get.return_value = fake_response(
            "status=OK\r\notp=%s\r\n" % YUBICO_OTP
        )

        result = verify(YUBICO_OTP, yubico_config)

        assert result.h is None
        assert not result.signature_valid
        assert not result.nonce_valid
        assert not result.valid

    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_unknown_fields(self, m_get, yubico_config):
        m_get.side_effect = echo_service(status="NEW_STATUS", info="more")

        result = verify(YUBICO_OTP, yubico_config)

        assert result.status == "NEW_STATUS"
        assert result.signature_valid
        assert not result.valid
        assert result.extra == {"info": "more"}

    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_http_error(self, m_get, yubico_config):
        m_get.return_value = fake_response(
            "", status_code=500, reason="Internal Server Error"
        )

        with pytest.raises(RequestError) as exx:
            verify(YUBICO_OTP, yubico_config)

        assert exx.value.status_code == 500
        assert exx.value.reason == "Internal Server Error"
        assert "[500]" in exx.value.getDescription()

    @pytest.mark.parametrize(
        "exception,error_class",
        [
            (requests.exceptions.ConnectTimeout, RequestTimeoutError),
            (requests.exceptions.ReadTimeout, RequestTimeoutError),
            (requests.exceptions.ConnectionError, RequestError),
            (requests.exceptions.TooManyRedirects, RequestError),
        ],
    )
    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_unavailable(
        self, m_get, exception, error_class, yubico_config
    ):
        m_get.side_effect = exception("boom")

        with pytest.raises(error_class) as exx:
            verify(YUBICO_OTP, yubico_config)

        assert exx.value.url == yubico_config.service_url

    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_timeout_parameter(self, m_get, yubico_config):
        m_get.side_effect = echo_service()

        verify(YUBICO_OTP, yubico_config, timeout="3,10")

        assert m_get.call_args.kwargs["timeout"] == (3.0, 10.0)

    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_fresh_nonce(self, m_get, yubico_config):
        m_get.side_effect = echo_service()
        validator = YubicoValidator(yubico_config)

        first = validator.verify(YUBICO_OTP)
        second = validator.verify(YUBICO_OTP)

        nonces = [c.kwargs["params"]["nonce"] for c in m_get.call_args_list]

        assert len(nonces) == 2
        assert nonces[0] != nonces[1]
        for nonce in nonces:
            assert "-" not in nonce
            assert len(nonce) == 32

        assert first.nonce_valid and second.nonce_valid
        assert first.nonce == nonces[0]
        assert second.nonce == nonces[1]

    def test_verify_with_session(self, yubico_config):
        session = MagicMock()
        session.get.side_effect = echo_service()

        result = YubicoValidator(yubico_config, session=session).verify(
            YUBICO_OTP
        )

        assert result.valid
        assert session.get.call_count == 1

    @patch("mfaotp.tokens.yubicotoken.requests.get")
    def test_verify_custom_service(self, m_get):
        config = YubicoConfig(
            client_id="42",
            api_key=YUBICO_API_KEY,
            service_url="http://localhost:8080/wsapi/2.0/verify",
        )
        m_get.side_effect = echo_service()

        assert verify(int("123456789012"), config).device_id == "123456789012"
        assert (
            m_get.call_args.args[0] == "http://localhost:8080/wsapi/2.0/verify"
        )


def test_signed_response_helper():
    text = signed_response_text({"status": "OK"}, signature="abc=")
    assert text == "h=abc=\r\nstatus=OK\r\n\r\n"
