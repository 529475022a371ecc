import logging
import os
import sys
from pathlib import Path

from linkbox.rules.models import Rules

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(rules: Rules | None = None) -> None:
    level_name = rules.ops.log_level.upper() if rules else "INFO"
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def resolve_data_dir(rules: Rules) -> Path:
    """Data directory from the configured env var, else the rules default."""
    return Path(os.environ.get(rules.storage.data_dir_env, rules.storage.data_dir))


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.
    Exits with status 1 when required environment variables are missing.
    """
    missing = [env_var for env_var in rules.ops.required_env if env_var not in os.environ]
    if missing:
        print(
            f"CRITICAL: Missing required environment variables: {', '.join(missing)}",
            file=sys.stderr,
        )
        sys.exit(1)

    data_dir = resolve_data_dir(rules)
    if data_dir.exists() and not os.access(data_dir, os.W_OK):
        print(f"CRITICAL: Data directory {data_dir} is not writable", file=sys.stderr)
        sys.exit(1)
