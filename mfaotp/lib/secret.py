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
the secret seed of the hmac based one time password tokens
"""

import base64
import binascii
import logging
import re

from mfaotp.lib.crypto.utils import geturandom
from mfaotp.lib.error import DecodeError

DEFAULT_SEED_SIZE = 20  # 160 bit

BASE32_ALPHABET = re.compile(r"^[A-Z2-7]*=*$")

log = logging.getLogger(__name__)


def _b32decode(text):
    # the otpauth secrets are usually given without padding and
    # in lower case or in groups separated by blanks
    text = re.sub(r"\s+", "", text).upper()

    if not BASE32_ALPHABET.match(text):
        raise DecodeError("The provided seed contains non base32 characters")

    text = text.rstrip("=")
    text += "=" * (-len(text) % 8)

    try:
        return base64.b32decode(text)
    except binascii.Error as exx:
        raise DecodeError("The provided seed is not valid base32: %s" % exx)


def _b64decode(text):
    try:
        return base64.b64decode(re.sub(r"\s+", "", text), validate=True)
    except binascii.Error as exx:
        raise DecodeError("The provided seed is not valid base64: %s" % exx)


def _hexdecode(text):
    try:
        return binascii.unhexlify(re.sub(r"\s+", "", text))
    except (binascii.Error, ValueError) as exx:
        raise DecodeError("The provided seed is not valid hex: %s" % exx)


class Secret:
    """
    an immutable byte seed

    two secrets are equal if their bytes are equal. The repr never
    reveals the seed.
    """

    __slots__ = ("_bytes",)

    decoders = {
        "base32": _b32decode,
        "base64": _b64decode,
        "hex": _hexdecode,
    }

    def __init__(self, seed=None, size: int = DEFAULT_SEED_SIZE):
        """
        create a secret

        :param seed: the seed - a string is decoded as base32, bytes are
                     used as they are. Without seed random bytes are used.
        :param size: the number of random bytes, if no seed is given
        """

        if seed is None:
            seed = geturandom(size)
        elif isinstance(seed, str):
            seed = _b32decode(seed)
        elif not isinstance(seed, (bytes, bytearray, memoryview)):
            raise TypeError("unsupported seed type %r" % type(seed))

        object.__setattr__(self, "_bytes", bytes(seed))

    @classmethod
    def generate(cls, size: int = DEFAULT_SEED_SIZE) -> "Secret":
        """create a secret from cryptographically random bytes"""
        return cls(geturandom(size))

    @classmethod
    def from_bytes(cls, data: bytes) -> "Secret":
        return cls(bytes(data))

    @classmethod
    def from_encoded(cls, text: str, encoding: str = "base32") -> "Secret":
        """
        create a secret from its text representation

        :param text: the encoded seed
        :param encoding: 'base32', 'base64', 'hex' or a text codec
                         like 'utf-8' or 'latin-1'
        :raises DecodeError: if the text does not fit the encoding
        """

        decoder = cls.decoders.get(encoding.lower())
        if decoder is not None:
            return cls(decoder(text))

        try:
            return cls(text.encode(encoding))
        except LookupError:
            raise DecodeError("unsupported encoding %r" % encoding)
        except UnicodeEncodeError as exx:
            raise DecodeError(
                "The provided seed is not valid %s: %s" % (encoding, exx)
            )

    @property
    def buffer(self) -> bytes:
        return self._bytes

    def to_string(self, encoding: str = "base32") -> str:
        """
        dump the secret to a string representation

        base32 is returned without the '=' padding as expected in the
        otpauth urls
        """

        encoding = encoding.lower()

        if encoding == "base32":
            return base64.b32encode(self._bytes).decode().rstrip("=")
        if encoding == "base64":
            return base64.b64encode(self._bytes).decode()
        if encoding == "hex":
            return binascii.hexlify(self._bytes).decode()

        try:
            return self._bytes.decode(encoding)
        except LookupError:
            raise DecodeError("unsupported encoding %r" % encoding)
        except UnicodeDecodeError as exx:
            raise DecodeError(
                "The secret can not be represented as %s: %s"
                % (encoding, exx)
            )

    def __setattr__(self, name, value):
        raise AttributeError("Secret is immutable")

    def __len__(self):
        return len(self._bytes)

    def __bytes__(self):
        return self._bytes

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return "<Secret of %d bytes>" % len(self._bytes)

    def __eq__(self, other):
        if not isinstance(other, Secret):
            return NotImplemented
        return self._bytes == other._bytes

    def __hash__(self):
        return hash(self._bytes)


# eof
