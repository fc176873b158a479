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
secret, hotp and totp commands
"""

import click

from mfaotp.cli import EXIT_MISMATCH, MfaOtpCliError, handle_errors
from mfaotp.lib.apps import create_png
from mfaotp.lib.crypto.utils import DigestAlgorithm
from mfaotp.lib.secret import DEFAULT_SEED_SIZE, Secret
from mfaotp.tokens.hmactoken import HOTP, HotpConfig
from mfaotp.tokens.totptoken import TOTP, TotpConfig

ALGORITHMS = [algo.name for algo in DigestAlgorithm]
ENCODINGS = ["base32", "base64", "hex"]


# common options of the hmac based tokens


def token_options(func):
    options = [
        click.option(
            "--secret",
            "-s",
            default=None,
            help="The base32 encoded secret (default: setting SECRET).",
        ),
        click.option(
            "--algorithm",
            "-a",
            type=click.Choice(ALGORITHMS, case_sensitive=False),
            default="SHA1",
            show_default=True,
            help="The hash algorithm of the hmac.",
        ),
        click.option(
            "--digits",
            "-d",
            type=click.Choice(["6", "8"]),
            default="6",
            show_default=True,
            help="The number of digits of the otp.",
        ),
        click.option(
            "--window",
            "-w",
            type=click.IntRange(min=0),
            default=1,
            show_default=True,
            help="The number of steps accepted before and after.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def uri_options(func):
    options = [
        click.option("--issuer", "-i", default="", help="The token issuer."),
        click.option("--label", "-l", default=None, help="The account label."),
        click.option(
            "--qrcode-url",
            is_flag=True,
            help="Output the url of a qr code image instead of the uri.",
        ),
        click.option(
            "--png",
            type=click.File("wb"),
            default=None,
            help="Write the uri as qr code png image into this file.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_secret(obj, secret):
    """the --secret option falls back to the SECRET setting"""
    return secret or obj["config"].get("SECRET") or None


def report_verification(echo, matched, delta):
    if not matched:
        echo("otp does not match", err=True)
        raise click.exceptions.Exit(EXIT_MISMATCH)

    echo("otp matches", v=1)
    echo("delta: %d" % delta)


def output_uri(echo, uri, qrcode_url_func, qrcode_url, png):
    if png is not None:
        png.write(create_png(uri))
        echo("qr code written to %s" % png.name, v=1)
        return

    if qrcode_url:
        echo(qrcode_url_func())
    else:
        echo(uri)


# -------------------------------------------------------------------------- --

# secret

# -------------------------------------------------------------------------- --


@click.command("secret", help="Generate a random secret.")
@click.option(
    "--size",
    type=click.IntRange(min=1),
    default=DEFAULT_SEED_SIZE,
    show_default=True,
    help="The number of random bytes.",
)
@click.option(
    "--encoding",
    type=click.Choice(ENCODINGS),
    default="base32",
    show_default=True,
)
@click.pass_obj
def secret_cmd(obj, size, encoding):
    secret = Secret.generate(size)
    if size * 8 < 128:
        obj["echo"]("warning: secrets should have at least 128 bits", err=True)
    obj["echo"](secret.to_string(encoding))


# -------------------------------------------------------------------------- --

# hotp

# -------------------------------------------------------------------------- --


@click.group("hotp", help="Counter based one time passwords (RFC 4226).")
def hotp_cmds():
    pass


def _hotp_config(secret, algorithm, digits, window, counter, **kwargs):
    return HotpConfig.build(
        secret=secret,
        algorithm=algorithm,
        digits=int(digits),
        window=window,
        counter=counter,
        **kwargs,
    )


@hotp_cmds.command("generate", help="Generate the otp for a counter.")
@token_options
@click.option("--counter", "-c", type=click.IntRange(min=0), default=0)
@click.pass_obj
@handle_errors
def hotp_generate_cmd(obj, secret, algorithm, digits, window, counter):
    secret = resolve_secret(obj, secret)
    echo = obj["echo"]
    config = _hotp_config(secret, algorithm, digits, window, counter)

    token, used_secret = HOTP.generate(config)

    if secret is None:
        echo("secret: %s" % used_secret, err=True)
    echo(token)


@hotp_cmds.command("verify", help="Verify an otp against a counter.")
@token_options
@click.option("--counter", "-c", type=click.IntRange(min=0), default=0)
@click.argument("otp")
@click.pass_obj
@handle_errors
def hotp_verify_cmd(obj, secret, algorithm, digits, window, counter, otp):
    secret = resolve_secret(obj, secret)
    if not secret:
        raise MfaOtpCliError("a secret is required to verify an otp")

    config = _hotp_config(secret, algorithm, digits, window, counter)

    matched, delta = HOTP.verify(otp, config)
    report_verification(obj["echo"], matched, delta)


@hotp_cmds.command("uri", help="Output the otpauth uri of a token.")
@token_options
@click.option("--counter", "-c", type=click.IntRange(min=0), default=0)
@uri_options
@click.pass_obj
@handle_errors
def hotp_uri_cmd(
    obj,
    secret,
    algorithm,
    digits,
    window,
    counter,
    issuer,
    label,
    qrcode_url,
    png,
):
    secret = resolve_secret(obj, secret)
    config = _hotp_config(
        secret, algorithm, digits, window, counter, issuer=issuer, label=label
    )
    output_uri(
        obj["echo"],
        HOTP.to_uri(config),
        lambda: HOTP.to_qrcode_url(config),
        qrcode_url,
        png,
    )


# -------------------------------------------------------------------------- --

# totp

# -------------------------------------------------------------------------- --


@click.group("totp", help="Time based one time passwords (RFC 6238).")
def totp_cmds():
    pass


def period_option(func):
    return click.option(
        "--period",
        "-p",
        type=click.IntRange(min=1),
        default=30,
        show_default=True,
        help="The time step in seconds.",
    )(func)


def timestamp_option(func):
    return click.option(
        "--timestamp",
        "-t",
        type=click.IntRange(min=0),
        default=None,
        help="Unix time in seconds instead of the current time.",
    )(func)


def _totp_config(secret, algorithm, digits, window, period, **kwargs):
    return TotpConfig.build(
        secret=secret,
        algorithm=algorithm,
        digits=int(digits),
        window=window,
        period=period,
        **kwargs,
    )


@totp_cmds.command("generate", help="Generate the current otp.")
@token_options
@period_option
@timestamp_option
@click.pass_obj
@handle_errors
def totp_generate_cmd(
    obj, secret, algorithm, digits, window, period, timestamp
):
    secret = resolve_secret(obj, secret)
    echo = obj["echo"]
    config = _totp_config(
        secret, algorithm, digits, window, period, timestamp=timestamp
    )

    token, used_secret = TOTP.generate(config)

    if secret is None:
        echo("secret: %s" % used_secret, err=True)
    echo(token)
    echo("valid for %d seconds" % TOTP.remaining_seconds(config), v=1)


@totp_cmds.command("verify", help="Verify an otp against the current time.")
@token_options
@period_option
@timestamp_option
@click.argument("otp")
@click.pass_obj
@handle_errors
def totp_verify_cmd(
    obj, secret, algorithm, digits, window, period, timestamp, otp
):
    secret = resolve_secret(obj, secret)
    if not secret:
        raise MfaOtpCliError("a secret is required to verify an otp")

    config = _totp_config(
        secret, algorithm, digits, window, period, timestamp=timestamp
    )

    matched, delta = TOTP.verify(otp, config)
    report_verification(obj["echo"], matched, delta)


@totp_cmds.command("uri", help="Output the otpauth uri of a token.")
@token_options
@period_option
@uri_options
@click.pass_obj
@handle_errors
def totp_uri_cmd(
    obj,
    secret,
    algorithm,
    digits,
    window,
    period,
    issuer,
    label,
    qrcode_url,
    png,
):
    secret = resolve_secret(obj, secret)
    config = _totp_config(
        secret, algorithm, digits, window, period, issuer=issuer, label=label
    )
    output_uri(
        obj["echo"],
        TOTP.to_uri(config),
        lambda: TOTP.to_qrcode_url(config),
        qrcode_url,
        png,
    )
