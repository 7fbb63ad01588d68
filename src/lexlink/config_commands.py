"""Configuration commands for lexlink CLI."""

from cyclopts import App

from lexlink.config import DEFAULTS, coerce_value, get_config

config_app = App(name="config", help="Manage storage, deadline and escalation settings")


def scope_name(global_: bool) -> str:
    return "global" if global_ else "local"


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Integer settings such as deadlines.preparation_days are validated and
    stored as numbers.

    Args:
        key: Configuration key, e.g. storage.path or escalation.recipients.primary
        value: Configuration value
        global_: If True, set in global config. If False, set in local config.
    """
    stored = coerce_value(key, value)
    config = get_config(use_global=global_)
    config.set(key, stored)
    print(f"Set {key} = {stored} ({scope_name(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Unset a configuration setting, restoring the fallback value."""
    config = get_config(use_global=global_)
    config.unset(key)
    print(f"Unset {key} ({scope_name(global_)})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Show a configuration setting and where its value comes from."""
    config = get_config(use_global=global_)
    source = config.source(key)
    if source is None:
        print(f"{key} is not set")
        return
    print(f"{key} = {config.get(key)} ({source})")


@config_app.command(name="list")
def list_config(global_: bool = False, defaults: bool = False) -> None:
    """List configuration settings.

    Args:
        global_: If True, list global config only. If False, list merged config.
        defaults: Also list built-in defaults that are not overridden.
    """
    config = get_config(use_global=global_)
    settings = config.list()
    if defaults:
        settings = {**{k: v for k, v in DEFAULTS.items() if v is not None}, **settings}

    if not settings:
        print(f"No {scope_name(global_)} configuration settings")
        return

    for key in sorted(settings):
        print(f"{key} = {settings[key]} ({config.source(key)})")
