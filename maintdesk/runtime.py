"""Runtime environment bootstrap."""

import os
from pathlib import Path

from dotenv import load_dotenv


DEV_ENV_REL_PATH = Path("deploy/dev.env")
"""Env file used for the dev environment, relative to the project root."""

PROD_ENV_REL_PATH = Path("deploy/prod.env")
"""Env file used for the prod environment, relative to the project root."""


def init_runtime() -> None:
    """Load the env file unless the process runs inside Docker."""
    is_docker = os.getenv("IS_DOCKER") == "1"
    if is_docker:
        return

    env = os.getenv("ENV", "dev").strip().lower()
    base_dir = Path(__file__).resolve().parents[1]

    env_rel_path = PROD_ENV_REL_PATH if env in ("prod", "production") else DEV_ENV_REL_PATH
    env_path = (base_dir / env_rel_path).resolve()

    if not env_path.exists():
        raise RuntimeError(f"Env file not found: {env_path}")

    load_dotenv(env_path, override=False)
