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
Cryptographic utility functions
"""

import enum
import hmac
import logging
import secrets
from hashlib import sha1, sha224, sha256, sha384, sha512
from uuid import uuid4

from mfaotp.lib.error import ParameterError

log = logging.getLogger(__name__)

Hashlib_map = {
    "sha1": sha1,
    "sha224": sha224,
    "sha256": sha256,
    "sha384": sha384,
    "sha512": sha512,
}


class DigestAlgorithm(str, enum.Enum):
    """
    the hash functions supported for the hmac based one time passwords.

    Most authenticator applications only support SHA1.
    """

    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @property
    def hashfunc(self):
        return Hashlib_map[self.value]

    def hmac(self, key: bytes, message: bytes) -> bytes:
        """compute the hmac digest of message, keyed by key"""
        return hmac.new(key, message, self.hashfunc).digest()

    def __str__(self):
        return self.value.upper()


def get_hashalgo_from_description(description, fallback="sha1"):
    """
    get the digest algorithm from a string value

    :param description: the literal description of the hash, e.g. 'SHA256'
    :param fallback: the hash algorithm used, if description is empty
    :return: DigestAlgorithm member
    """

    if isinstance(description, DigestAlgorithm):
        return description

    if not description:
        description = fallback

    try:
        return DigestAlgorithm(description.strip().lower())
    except (ValueError, AttributeError):
        raise ParameterError(
            "unsupported hash function %r - must be one of %s"
            % (description, ", ".join(str(algo) for algo in DigestAlgorithm))
        )


def hmac_digest(bkey: bytes, data_input: bytes, hash_algo=None) -> bytes:
    if hash_algo is None:
        hash_algo = DigestAlgorithm.SHA1

    return get_hashalgo_from_description(hash_algo).hmac(bkey, data_input)


def compare(one, two) -> bool:
    """
    position independend comparison of values

    the comparison time does not depend on the position of the first
    difference, so the result does not leak through timing

    :param one: first value (str or bytes)
    :param two: second value (str or bytes)
    :return: boolean
    """

    if isinstance(one, str):
        one = one.encode("utf-8")
    if isinstance(two, str):
        two = two.encode("utf-8")

    return hmac.compare_digest(one, two)


def geturandom(len=20):
    """
    get random bytes from the operating system csprng

    :param len:  len of the returned bytes - default is 20 bytes
    :return: buffer of bytes
    """

    return secrets.token_bytes(len)


def createNonce():
    """
    create a single use, printable nonce without dashes

    :return: 32 lowercase hex characters
    """

    return uuid4().hex


# eof
