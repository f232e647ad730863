"""
Leaf handlers of the scl tree.

Each handler receives its typed configuration, prints a title line and,
when asked for (dry run or verbose), the configuration as JSON. They stand
in for real work and always succeed.
"""
from rich.console import Console

from . import exits

console = Console()


def _report(title, config, /, *, always=False):
    console.print(title, highlight=False)
    if always or config.dry_run or config.verbose:
        console.print_json(data=config.asdict())
    return exits.SUCCESS


def add(config, /):
    """Example of using environment variables as default values"""
    return _report("Add Command", config)


def bootstrap_add(config, /):
    """Example of using sub-command specific options and validation"""
    return _report("Bootstrap Add Command", config)


def bootstrap_remove(config, /):
    """Example of using sub-command specific options and validation"""
    return _report("Bootstrap Remove Command", config)


def build(config, /):
    """Example using an enum option with defaults"""
    return _report("Build Command", config)


def check(config, /):
    """Check the application configuration"""
    return _report("Check Command", config)


def config(config, /):
    """Show the application configuration"""
    return _report("Config Command", config)


def init(config, /):
    """Initialize a new application"""
    return _report("Init Command", config)


def logs(config, /):
    """Show the application logs"""
    return _report("Logs Command", config)


def remove(config, /):
    """Remove the application"""
    return _report("Remove Command", config)


def set(config, /):
    """Set application values"""
    return _report("Set Command", config, always=True)


def sync(config, /):
    """Synchronize the application"""
    return _report("Sync Command", config)


__all__ = (
    "add",
    "bootstrap_add",
    "bootstrap_remove",
    "build",
    "check",
    "config",
    "init",
    "logs",
    "remove",
    "set",
    "sync",
)
