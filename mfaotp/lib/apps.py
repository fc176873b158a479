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

This file contains utilities to generate the URL for smartphone apps like
                google authenticator
                free otp

"""

import io
import logging
import urllib.parse
from urllib.parse import quote

import qrcode
from qrcode.image.pure import PyPNGImage

from mfaotp.lib.error import ParameterError

Valid_Token_Types = ("hotp", "totp")

QRCODE_SERVICE_URL = "https://quickchart.io/chart"

log = logging.getLogger(__name__)


def create_key_uri(token_type: str, config, **type_params) -> str:
    """create the key uri for the authenticator apps

      otpauth://TYPE/LABEL?PARAMETERS

    remark: be aware of that the google authenticator does not support
            other hash algorithms than 'SHA1' and no other digits like '6'!

    :param token_type: 'hotp' or 'totp'
    :param config: the finalized token configuration
    :param type_params: the type specific parameter, 'counter' for hotp
                        and 'period' for totp
    :return: string with the otpauth url
    """

    if token_type not in Valid_Token_Types:
        raise ParameterError(
            "not supported otpauth token type: %r" % token_type
        )

    # build the label, which is defined as:
    #   label = accountname / issuer (“:” / “%3A”) *”%20” accountname

    if config.issuer:
        label = quote(config.issuer) + ":" + quote(config.label)
    else:
        label = quote(config.label)

    # --------------------------------------------------------------------- --

    # gather the url parameters

    url_param = {}
    url_param["secret"] = config.secret.to_string()
    url_param["algorithm"] = config.algorithm.value.upper()
    url_param["digits"] = config.digits
    url_param.update(type_params)

    if config.issuer:
        url_param["issuer"] = config.issuer

    authenticator_params = urllib.parse.urlencode(url_param, quote_via=quote)

    auth_url = "otpauth://%s/%s?%s" % (token_type, label, authenticator_params)

    log.debug("authenticator url for label %r created", label)

    return auth_url


def create_qrcode_url(data: str, width: int = 256, height: int = 256) -> str:
    """
    create the url of a chart service, which renders the data as qr code

    :param data: the data - usually the key uri
    :param width: image width in pixel
    :param height: image height in pixel
    """

    return "%s?cht=qr&chs=%dx%d&chl=%s" % (
        QRCODE_SERVICE_URL,
        width,
        height,
        quote(data, safe=""),
    )


def create_png(data: str) -> bytes:
    """
    render the data as qr code png image

    :param data: the data - usually the key uri
    :return: the png image bytes
    """

    img = qrcode.make(data, image_factory=PyPNGImage)

    with io.BytesIO() as output:
        img.save(output)
        o_data = output.getvalue()

    return o_data


# eof
