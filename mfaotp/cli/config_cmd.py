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
config commands - show and explain the settings
"""

import textwrap

import click

from mfaotp.settings import ENV_PREFIX, get_config_schema

HIDDEN_VALUE = "********"

SAMPLE_ENV_BANNER = """# This is a sample mfaotp environment file.
# It contains {0} configuration settings with their hard-coded
# defaults. Every setting FOO is read from the environment variable
# {1}FOO. Feel free to copy this file, uncomment and edit any of
# these and source it into your shell.
"""


def _display_value(item, value):
    if item is not None and item.secret and value:
        return HIDDEN_VALUE
    return str(value)


config_cmds = click.Group("config", help="Show and explain the settings.")


@config_cmds.command("show", help="Output current configuration settings.")
@click.option(
    "--modified",
    "-m",
    is_flag=True,
    help="Show only items whose values differ from their defaults.",
)
@click.option(
    "--values",
    "-V",
    is_flag=True,
    help="Show only values of items, not their names.",
)
@click.argument("items", nargs=-1)
@click.pass_obj
def config_show_cmd(obj, modified, values, items=None):
    """Show the current configuration settings."""

    schema = get_config_schema()
    config = obj["config"]

    for k, v in sorted(config.items()):
        item = schema.find_item(k)
        display = not items or k in items
        if modified and display:
            display = item is not None and v != item.default
        if display:
            click.echo(("" if values else f"{k}=") + _display_value(item, v))


@config_cmds.command(
    "explain", help="Describe configuration settings in detail."
)
@click.option(
    "--sample-file",
    is_flag=True,
    help='Show items in "environment file" format.',
)
@click.option(
    "--banner/--no-banner",
    default=True,
    help='Show explanatory note at start of "environment file"',
)
@click.argument("items", nargs=-1)
@click.pass_obj
def config_explain_cmd(obj, sample_file, banner, items=None):
    """Explain configuration settings in the schema."""

    schema = get_config_schema()
    config = obj["config"]

    if sample_file and banner:
        click.echo(
            SAMPLE_ENV_BANNER.format(
                "all available" if not items else "some", ENV_PREFIX
            )
        )
    if not items:
        items = schema.as_dict().keys()
    for name in items:
        item = schema.find_item(name)
        if item is None:
            click.echo(f"No information on {name}")
        elif sample_file:
            description = f"{item.name}: {item.help}"
            click.echo(
                textwrap.fill(
                    description, initial_indent="# ", subsequent_indent="# "
                )
            )
            if item.validate is not None and item.validate.__doc__:
                click.echo(f"#\n# Constraints: {item.validate.__doc__}")
            default = "" if item.default is None else item.default
            click.echo(f"\n# {ENV_PREFIX}{item.name}={default}\n")
        else:
            click.echo(f"{item.name}:")
            click.echo(f"  Type: {item.type.__qualname__}")
            if item.validate is not None and item.validate.__doc__:
                click.echo(f"  Constraints: {item.validate.__doc__}")
            click.echo(f"  Default value: {item.default}")
            click.echo(
                "  Current value: "
                + _display_value(item, config.get(item.name))
            )
            description = f"  Description: {item.help}"
            click.echo(
                textwrap.fill(
                    description, initial_indent="", subsequent_indent="    "
                )
            )
