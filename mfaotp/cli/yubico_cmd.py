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
yubico commands - verify a YubiKey OTP with the validation service
"""

import click

from mfaotp.cli import EXIT_MISMATCH, MfaOtpCliError, handle_errors
from mfaotp.lib.type_utils import parse_timeout
from mfaotp.tokens.yubicotoken import YubicoConfig, YubicoValidator


@click.group("yubico", help="YubiKey OTP validation (protocol 2.0).")
def yubico_cmds():
    pass


@yubico_cmds.command("verify", help="Verify a YubiKey OTP.")
@click.option(
    "--client-id",
    default=None,
    help="The client id (default: setting YUBICO_CLIENT_ID).",
)
@click.option(
    "--api-key",
    default=None,
    help="The base64 api key (default: setting YUBICO_API_KEY).",
)
@click.option(
    "--url",
    default=None,
    help="The validation service (default: setting YUBICO_URL).",
)
@click.option(
    "--timeout",
    default=None,
    help="Timeout in seconds or 'connect,read' (default: YUBICO_TIMEOUT).",
)
@click.argument("otp")
@click.pass_obj
@handle_errors
def yubico_verify_cmd(obj, client_id, api_key, url, timeout, otp):
    echo = obj["echo"]
    config = obj["config"]

    client_id = client_id or config["YUBICO_CLIENT_ID"]
    api_key = api_key or config["YUBICO_API_KEY"]

    if not client_id or not api_key:
        raise MfaOtpCliError(
            "client id and api key are required - use the options or the "
            "MFAOTP_YUBICO_CLIENT_ID and MFAOTP_YUBICO_API_KEY variables"
        )

    if timeout is None:
        timeout = config["YUBICO_TIMEOUT"]
    else:
        try:
            timeout = parse_timeout(timeout)
        except ValueError as exx:
            raise MfaOtpCliError("invalid timeout %r: %s" % (timeout, exx))

    yubico_config = YubicoConfig(
        client_id=client_id,
        api_key=api_key,
        service_url=url or config["YUBICO_URL"],
    )

    result = YubicoValidator(yubico_config).verify(otp, timeout=timeout)

    echo("device: %s" % result.device_id, v=1)
    echo("status: %s" % getattr(result.status, "value", result.status), v=1)
    echo("signature valid: %s" % result.signature_valid, v=1)
    if result.t is not None:
        echo("timestamp: %s" % result.t.isoformat(), v=2)

    if not result.valid:
        echo("otp is not valid", err=True)
        raise click.exceptions.Exit(EXIT_MISMATCH)

    echo("otp is valid")
