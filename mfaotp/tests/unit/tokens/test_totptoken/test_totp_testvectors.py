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
totp token - RFC 6238 compliance test
"""

from datetime import datetime, timezone

import pytest
from freezegun import freeze_time

from mfaotp.lib.secret import Secret
from mfaotp.tokens.totptoken import TOTP, TotpConfig

SEEDS = {
    "SHA1": Secret(b"12345678901234567890"),
    "SHA256": Secret(b"12345678901234567890123456789012"),
    "SHA512": Secret(
        b"1234567890123456789012345678901234567890"
        b"123456789012345678901234"
    ),
}

TOTP_Vectors = """
+-------------+----------------------+------------------+----------+--------+
|  Time (sec) |   UTC Time           | Value of T (hex) |   TOTP   |  Mode  |
+-------------+----------------------+------------------+----------+--------+
|      59     |  1970-01-01 00:00:59 | 0000000000000001 | 94287082 |  SHA1  |
|      59     |  1970-01-01 00:00:59 | 0000000000000001 | 46119246 | SHA256 |
|      59     |  1970-01-01 00:00:59 | 0000000000000001 | 90693936 | SHA512 |
|  1111111109 |  2005-03-18 01:58:29 | 00000000023523EC | 07081804 |  SHA1  |
|  1111111109 |  2005-03-18 01:58:29 | 00000000023523EC | 68084774 | SHA256 |
|  1111111109 |  2005-03-18 01:58:29 | 00000000023523EC | 25091201 | SHA512 |
|  1111111111 |  2005-03-18 01:58:31 | 00000000023523ED | 14050471 |  SHA1  |
|  1111111111 |  2005-03-18 01:58:31 | 00000000023523ED | 67062674 | SHA256 |
|  1111111111 |  2005-03-18 01:58:31 | 00000000023523ED | 99943326 | SHA512 |
|  1234567890 |  2009-02-13 23:31:30 | 000000000273EF07 | 89005924 |  SHA1  |
|  1234567890 |  2009-02-13 23:31:30 | 000000000273EF07 | 91819424 | SHA256 |
|  1234567890 |  2009-02-13 23:31:30 | 000000000273EF07 | 93441116 | SHA512 |
|  2000000000 |  2033-05-18 03:33:20 | 0000000003F940AA | 69279037 |  SHA1  |
|  2000000000 |  2033-05-18 03:33:20 | 0000000003F940AA | 90698825 | SHA256 |
|  2000000000 |  2033-05-18 03:33:20 | 0000000003F940AA | 38618901 | SHA512 |
| 20000000000 |  2603-10-11 11:33:20 | 0000000027BC86AA | 65353130 |  SHA1  |
| 20000000000 |  2603-10-11 11:33:20 | 0000000027BC86AA | 77737706 | SHA256 |
| 20000000000 |  2603-10-11 11:33:20 | 0000000027BC86AA | 47863826 | SHA512 |
+-------------+----------------------+------------------+----------+--------+
"""


def range_tvector():
    """
    helper, to iterate through the test vectors
    """

    for line in TOTP_Vectors.split("\n"):

        # skip the table borders and the header
        if not line or line.strip().startswith("+") or "Time" in line:
            continue

        (seconds, utc_time, counter_hex, totp, hash_algo) = [
            x.strip() for x in line.strip().strip("|").split("|")
        ]

        t_time = datetime.strptime(utc_time, "%Y-%m-%d %H:%M:%S").replace(
            tzinfo=timezone.utc
        )

        yield int(seconds), t_time, int(counter_hex, 16), totp, hash_algo


@pytest.mark.parametrize(
    "seconds,t_time,counter,totp,hash_algo", list(range_tvector())
)
def test_totp_vectors(seconds, t_time, counter, totp, hash_algo):
    config = TotpConfig.build(
        secret=SEEDS[hash_algo],
        digits=8,
        algorithm=hash_algo,
        timestamp=seconds,
    )

    assert config.timestamp == t_time
    assert config.counter == counter

    token, _secret = TOTP.generate(config)
    assert token == totp

    assert TOTP.verify(totp, config, window=0) == (True, 0)


@pytest.mark.parametrize(
    "seconds,t_time,counter,totp,hash_algo", list(range_tvector())[:12]
)
def test_totp_vectors_current_time(seconds, t_time, counter, totp, hash_algo):
    """without timestamp the current time is used"""

    with freeze_time(t_time):
        token, _secret = TOTP.generate(
            secret=SEEDS[hash_algo], digits=8, algorithm=hash_algo
        )

    assert token == totp


def test_base32_secret_at_59():
    token, secret = TOTP.generate(
        secret="GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", timestamp=59
    )

    assert token == "287082"
    assert secret.buffer == b"12345678901234567890"
