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

"""Entry point for the mfaotp CLI.

The `main()` function in this file is installed as a console entry point
in `setup.py()`, so that the shell command `mfaotp` calls that function.

Exit codes: 0 on success (the otp matched), 1 if the otp did not match or
was not valid, 2 on usage and configuration errors and 3 if the
validation service could not be reached.
"""

import functools
import logging

import click

from mfaotp import __version__
from mfaotp.lib.error import DecodeError, ParameterError, RequestError
from mfaotp.lib.logs import init_logging
from mfaotp.settings import (
    MfaOtpConfigKeyError,
    MfaOtpConfigValueError,
    load_config,
)

EXIT_MISMATCH = 1
EXIT_USAGE = 2
EXIT_UNAVAILABLE = 3


class Echo:
    """Echo class, which extends `click.echo()` to respect verbosity.

    The verbosity of the respective line is expressed by an additional
    parameter, `v` or `verbosity`.

    - 0 is used for results, error messages and warnings (always displayed)
    - 1 is used for informational messages  (seen with `-v`)
    - 2 is used for more detailed information (seen with `-vv`)

    If the verbosity level is set to `-1`, no messages will be output at
    all; this is used to implement the `--quiet` option.

    Unlike `click.echo()`, messages go to `stdout` by default as the
    results of the commands are printed with it. Use `err=True` to
    redirect them to `stderr` instead.
    """

    def __init__(self, verbosity=0):
        self.verbosity = verbosity

    def log_level(self):
        log_levels = {
            -1: logging.CRITICAL,  # -q
            0: logging.ERROR,  # default
            1: logging.WARNING,  # -v
            2: logging.INFO,  # -vv
            3: logging.DEBUG,  # -vvv
        }
        return log_levels.get(self.verbosity, logging.DEBUG)

    def __call__(self, message, **kwargs):
        verbosity = kwargs.pop("v", kwargs.pop("verbosity", 0))
        if verbosity <= self.verbosity:
            click.echo(message, **kwargs)


class MfaOtpCliError(click.ClickException):
    """click exception with a configurable exit code"""

    def __init__(self, message, exit_code=EXIT_USAGE):
        super().__init__(message)
        self.exit_code = exit_code


def handle_errors(func):
    """
    decorator to map the library errors to cli errors with the
    documented exit codes
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ParameterError, DecodeError) as exx:
            raise MfaOtpCliError(exx.getDescription(), exit_code=EXIT_USAGE)
        except RequestError as exx:
            raise MfaOtpCliError(
                exx.getDescription(), exit_code=EXIT_UNAVAILABLE
            )

    return wrapper


@click.version_option(version=__version__, message="mfaotp %(version)s")
@click.group(name="mfaotp")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help=(
        "Increase amount of output from the command "
        "(can be specified several times)."
    ),
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help=(
        "Don't generate any output at all "
        "(check exit code for success/failure)."
    ),
)
@click.pass_context
def main(ctx, verbose, quiet):
    echo = Echo(-1 if quiet else verbose)

    try:
        config = load_config()
    except (MfaOtpConfigKeyError, MfaOtpConfigValueError) as exx:
        raise MfaOtpCliError("Failed to load configuration: %s" % exx)

    if verbose or quiet:
        config["LOG_LEVEL"] = logging.getLevelName(echo.log_level())
        config["LOG_CONSOLE_LEVEL"] = config["LOG_LEVEL"]

    init_logging(config)

    ctx.obj = {"config": config, "echo": echo}


from mfaotp.cli.config_cmd import config_cmds  # noqa: E402
from mfaotp.cli.otp_cmd import hotp_cmds, secret_cmd, totp_cmds  # noqa: E402
from mfaotp.cli.yubico_cmd import yubico_cmds  # noqa: E402

main.add_command(secret_cmd)
main.add_command(hotp_cmds)
main.add_command(totp_cmds)
main.add_command(yubico_cmds)
main.add_command(config_cmds)


if __name__ == "__main__":
    main()  # pylint: disable=no-value-for-parameter
