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
HMAC-OTP (RFC 4226)
"""

import logging
import struct

from mfaotp.lib.crypto.utils import DigestAlgorithm, compare
from mfaotp.lib.secret import Secret

log = logging.getLogger(__name__)


class HmacOtp:
    def __init__(
        self,
        secObj: Secret,
        counter: int = 0,
        digits: int = 6,
        algorithm: DigestAlgorithm = DigestAlgorithm.SHA1,
    ):
        self.secretObj = secObj
        self.counter = counter
        self.digits = digits
        self.algorithm = algorithm

    def hmac(self, counter: int | None = None) -> bytes:
        if counter is None:
            counter = self.counter

        data_input = struct.pack(">Q", counter)

        return self.algorithm.hmac(self.secretObj.buffer, data_input)

    def truncate(self, digest: bytes) -> int:
        offset = digest[-1] & 0x0F

        binary = (digest[offset + 0] & 0x7F) << 24
        binary |= (digest[offset + 1] & 0xFF) << 16
        binary |= (digest[offset + 2] & 0xFF) << 8
        binary |= digest[offset + 3] & 0xFF

        return binary % (10**self.digits)

    def generate(self, counter: int | None = None) -> str:
        otp = str(self.truncate(self.hmac(counter=counter)))

        # fill in the leading zeros

        return otp.rjust(self.digits, "0")

    def checkOtp(self, anOtpVal: str, window: int) -> int | None:
        """
        search the counter range [counter - window, counter + window]
        for the given otp. Negative counters are never tried.

        :param anOtpVal: the otp, already normalized to digits characters
        :param window: the number of counters to look at on each side
        :return: the offset of the first matching counter relative to the
                 current counter or None if no counter matches
        """

        start = max(0, self.counter - window)
        end = self.counter + window

        for c in range(start, end + 1):
            otpval = self.generate(c)

            if compare(otpval, anOtpVal):
                return c - self.counter

        return None


# eof##########################################################################
