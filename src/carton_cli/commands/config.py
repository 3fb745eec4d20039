"""carton config command."""

import sys

import click

from ..config import get_config, set_color_enabled, set_default_path
from ..utils.console import _rich_echo, _rich_error, _rich_success

_BOOLEAN_VALUES = {
    "true": True, "yes": True, "on": True, "1": True,
    "false": False, "no": False, "off": False, "0": False,
}


@click.group(help="View or change carton configuration")
def config():
    pass


@config.command(name="get", help="Show configuration values")
@click.argument("key", required=False)
def get_value(key):
    values = get_config()
    if key is None:
        for name in sorted(values):
            _rich_echo(f"{name}: {values[name]}")
        return
    if key not in values:
        _rich_error(f"Unknown configuration key: {key}")
        sys.exit(1)
    _rich_echo(str(values[key]))


@config.command(name="set", help="Set a configuration value (path or color)")
@click.argument("key", type=click.Choice(["path", "color"]))
@click.argument("value")
def set_value(key, value):
    if key == "path":
        set_default_path(value)
    else:
        enabled = _BOOLEAN_VALUES.get(value.lower())
        if enabled is None:
            _rich_error(f"Invalid value for color: {value} (use true or false)")
            sys.exit(1)
        set_color_enabled(enabled)
    _rich_success(f"Set {key} to {value}")
