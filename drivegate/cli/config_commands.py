import click
import yaml
from drivegate.sdk import config

# Define the schema of allowed configuration keys and their value types
ALLOWED_CONFIG = {
    "auth.client_id": {"type": str},
    "auth.client_secret": {"type": str, "secret": True},
    "auth.redirect_uri": {"type": str},
    "auth.refresh_token": {"type": str, "secret": True},
    "auth.token_file": {"type": str},
    "storage.image_dir": {"type": str},
    "storage.upload_dir": {"type": str},
    "retry.max_attempts": {"type": int},
    "retry.base_delay": {"type": float},
    "retry.max_delay": {"type": float},
    "server.host": {"type": str},
    "server.port": {"type": int},
}

MASK = "********"


def _masked(config_data: dict) -> dict:
    for key, schema in ALLOWED_CONFIG.items():
        if schema.get("secret"):
            section, name = key.split(".")
            if (config_data.get(section) or {}).get(name):
                config_data[section][name] = MASK
    return config_data


@click.group()
def config_group():
    """Commands for managing drivegate configuration."""
    pass

@config_group.command('view')
def view_config():
    """Displays the effective configuration (secrets masked)."""
    config_data = config.load_config()
    click.echo(f"# {config.get_config_file_path()}")
    click.echo(yaml.dump(_masked(config_data), default_flow_style=False))

@config_group.command('set')
@click.argument('key')
@click.argument('value')
def set_config(key, value):
    """
    Sets a configuration value for a supported key.

    \b
    Examples:
      drivegate config set auth.token_file ~/.config/drivegate/token.json
      drivegate config set retry.max_attempts 5
      drivegate config set server.port 8080
    """
    if key not in ALLOWED_CONFIG:
        supported = ", ".join(sorted(ALLOWED_CONFIG))
        raise click.UsageError(f"Configuration key '{key}' is not supported. Supported keys: {supported}")

    value_type = ALLOWED_CONFIG[key]["type"]
    try:
        converted = value_type(value)
    except ValueError:
        raise click.UsageError(f"Invalid value '{value}' for key '{key}': expected {value_type.__name__}.")

    config.set_config_value(key, converted)
    shown = MASK if ALLOWED_CONFIG[key].get("secret") else converted
    click.echo(f"Set '{key}' to '{shown}'.")
