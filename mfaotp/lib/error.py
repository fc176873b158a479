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

"""definition of some specific error classes"""

import logging

log = logging.getLogger(__name__)


class MfaOtpError(Exception):
    def __init__(self, description="MfaOtpError!", id=10):
        self.id = id
        self.message = description
        Exception.__init__(self, description)

    def getId(self):
        return self.id

    def getDescription(self):
        return self.message

    def __str__(self):
        pstr = "ERR%d: %r"
        if isinstance(self.message, str):
            pstr = "ERR%d: %s"

        return pstr % (self.id, self.message)

    def __repr__(self):
        ret = "%s(description=%r, id=%d)" % (
            type(self).__name__,
            self.message,
            self.id,
        )
        return ret


class DecodeError(MfaOtpError):
    """a seed or key text is not valid in its declared encoding"""

    def __init__(self, description="decoding error!", id=301):
        MfaOtpError.__init__(self, description=description, id=id)


class ParameterError(MfaOtpError):
    def __init__(self, description="unspecified parameter error!", id=905):
        MfaOtpError.__init__(self, description=description, id=id)


class RequestError(MfaOtpError):
    """
    the validation service could not be reached or did not answer with a
    success status. The failing url, the http status code and the status
    text are kept on the exception.
    """

    def __init__(
        self,
        description="request error!",
        id=501,
        url=None,
        status_code=None,
        reason=None,
    ):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        MfaOtpError.__init__(self, description=description, id=id)


class RequestTimeoutError(RequestError):
    def __init__(self, description="request timed out!", id=502, url=None):
        RequestError.__init__(self, description=description, id=id, url=url)


# eof
