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
mfaotp - one time passwords for multi-factor authentication.

Token engines
-------------

    mfaotp.tokens.hmactoken    counter based one time passwords (RFC 4226)
    mfaotp.tokens.totptoken    time based one time passwords (RFC 6238)
    mfaotp.tokens.yubicotoken  validation of YubiKey OTPs against the
                               Yubico validation service (protocol 2.0)

The secret seed of the HMAC based tokens is modeled by
mfaotp.lib.secret.Secret. None of the engines keeps any state between
calls: storing the secret and incrementing the HOTP counter is left to
the caller.

"""

# IMPORTANT! This file is imported by setup.py, therefore do not (directly or
# indirectly) import any module that might not yet be installed when installing
# mfaotp.

__copyright__ = "Copyright (C) netgo software GmbH"
__product__ = "mfaotp"
__license__ = "Gnu AGPLv3"
__contact__ = "www.linotp.org"
__email__ = "info@linotp.de"
# The versioning follows pep-0440
# i.e.  [N!]N(.N)*[{a|b|rc}N][.postN][.devN]
__version__ = "1.0.3"
