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

"""type converters for configuration values given as strings"""


def parse_timeout(timeout_val, seperator=","):
    """
    parse a timeout value which migth be a single value or a tuple of
    connection and response timeouts

    :params timeout_val: timeout value which could be either string, tuple
                         or float/int

    :return: timeout tuple of float or float/int timeout value
    """

    if isinstance(timeout_val, tuple):
        return timeout_val

    if isinstance(timeout_val, str):
        if seperator in timeout_val:
            connection_time, response_time = timeout_val.split(seperator)
            return (float(connection_time), float(response_time))
        else:
            return float(timeout_val)

    if isinstance(timeout_val, (float, int)) and not isinstance(
        timeout_val, bool
    ):
        return timeout_val

    raise ValueError("unsupported timeout format")


# eof
