"""
Settings loaded from YAML config files and the environment.

Client settings live in ``comms.<APP_ENV>.yaml`` (falling back to
``comms.yaml``) under a config directory. Credentials come from ``COMMS_*``
environment variables, optionally read from a ``.env`` file.
"""
import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .auth.credentials import (
    ApiKeySecretCredential,
    BearerTokenCredential,
    Credential,
    CredentialSet,
    HmacSignedCredential,
    JwtCredential,
)
from .config import DEFAULT_API_BASE_URI, DEFAULT_REST_BASE_URI, ClientConfig, HttpConfig, TimeoutConfig
from .console import mask_sensitive

logger = logging.getLogger(__name__)

CONFIG_BASENAME = "comms"

ENV_API_KEY = "COMMS_API_KEY"
ENV_API_SECRET = "COMMS_API_SECRET"
ENV_SIGNATURE_SECRET = "COMMS_SIGNATURE_SECRET"
ENV_SIGNATURE_METHOD = "COMMS_SIGNATURE_METHOD"
ENV_APPLICATION_ID = "COMMS_APPLICATION_ID"
ENV_PRIVATE_KEY_PATH = "COMMS_PRIVATE_KEY_PATH"
ENV_PRIVATE_KEY = "COMMS_PRIVATE_KEY"
ENV_BEARER_TOKEN = "COMMS_BEARER_TOKEN"


class TimeoutSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    connect: float = Field(default=5.0, gt=0)
    read: float = Field(default=30.0, gt=0)
    write: float = Field(default=10.0, gt=0)


class ClientSettings(BaseModel):
    """Validated contents of a comms YAML config file."""

    model_config = ConfigDict(extra="forbid")

    api_base_uri: str = DEFAULT_API_BASE_URI
    rest_base_uri: str = DEFAULT_REST_BASE_URI
    timeout: TimeoutSettings = Field(default_factory=TimeoutSettings)
    headers: Dict[str, str] = Field(default_factory=dict)
    user_agent: Optional[str] = None
    trace_http: bool = False

    def to_client_config(self) -> ClientConfig:
        return ClientConfig(
            http=HttpConfig(api_base_uri=self.api_base_uri, rest_base_uri=self.rest_base_uri),
            timeout=TimeoutConfig(connect=self.timeout.connect, read=self.timeout.read, write=self.timeout.write),
            headers=dict(self.headers),
            user_agent=self.user_agent,
            trace_http=self.trace_http,
        )


def find_config_path(config_dir: Union[str, Path], app_env: str) -> Path:
    """Find the config file for APP_ENV, falling back to the default file."""
    base_path = Path(config_dir)
    env_specific = base_path / f"{CONFIG_BASENAME}.{app_env}.yaml"
    if env_specific.exists():
        logger.debug(f"Using environment-specific config: {env_specific}")
        return env_specific

    default = base_path / f"{CONFIG_BASENAME}.yaml"
    if default.exists():
        logger.debug(f"Using default config: {default}")
        return default

    raise FileNotFoundError(f"No config file found. Tried: {env_specific}, {default}")


def load_settings(config_dir: Union[str, Path], app_env: Optional[str] = None) -> ClientSettings:
    """
    Load client settings from YAML.

    Args:
        config_dir: Directory holding comms.yaml / comms.<env>.yaml
        app_env: Environment name (default: from APP_ENV env var or 'dev')

    Raises:
        FileNotFoundError: neither file exists
        ValueError: the file is not valid YAML or does not match ClientSettings
    """
    env = app_env or os.environ.get("APP_ENV", "dev")
    logger.info(f"Loading comms settings for APP_ENV={env}")

    config_path = find_config_path(config_dir, env)
    try:
        raw_data = yaml.safe_load(config_path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"YAML parsing error in {config_path}: {e}") from e

    if not isinstance(raw_data, dict):
        raise ValueError(f"{config_path} must contain a mapping, got {type(raw_data).__name__}")

    try:
        settings = ClientSettings.model_validate(raw_data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings in {config_path}: {e}") from e

    logger.info(f"Successfully loaded settings from: {config_path}")
    return settings


def read_environment(
    env_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    override: bool = False,
) -> Dict[str, str]:
    """
    Merge process environment with an optional .env file.

    Values already in the environment win unless ``override`` is set.
    """
    values = dict(os.environ if environ is None else environ)
    if env_file is None:
        return values

    path = Path(env_file)
    if not path.is_file():
        raise FileNotFoundError(f"Env file does not exist: {path}")

    logger.info(f"Loading env file: {path}")
    for key, value in dotenv_values(path).items():
        if value is None:
            continue
        if override or key not in values:
            logger.debug(f"  {key}: {mask_sensitive(value)}")
            values[key] = value
    return values


def load_credentials(
    env_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    override: bool = False,
) -> CredentialSet:
    """
    Build a CredentialSet from ``COMMS_*`` variables.

    - COMMS_API_KEY + COMMS_API_SECRET -> API key/secret
    - COMMS_API_KEY + COMMS_SIGNATURE_SECRET (+ COMMS_SIGNATURE_METHOD) -> HMAC signing
    - COMMS_APPLICATION_ID + COMMS_PRIVATE_KEY_PATH (or COMMS_PRIVATE_KEY) -> application JWT
    - COMMS_BEARER_TOKEN -> static bearer token, used only when no JWT is configured
    """
    values = read_environment(env_file, environ, override)
    credentials: List[Credential] = []

    api_key = values.get(ENV_API_KEY)
    if api_key and values.get(ENV_API_SECRET):
        credentials.append(ApiKeySecretCredential(api_key, values[ENV_API_SECRET]))
    if api_key and values.get(ENV_SIGNATURE_SECRET):
        credentials.append(
            HmacSignedCredential(
                api_key,
                values[ENV_SIGNATURE_SECRET],
                method=values.get(ENV_SIGNATURE_METHOD) or "md5hash",
            )
        )

    application_id = values.get(ENV_APPLICATION_ID)
    private_key = values.get(ENV_PRIVATE_KEY)
    private_key_path = values.get(ENV_PRIVATE_KEY_PATH)
    if application_id and (private_key or private_key_path):
        credentials.append(JwtCredential(application_id, private_key or Path(private_key_path)))
    elif values.get(ENV_BEARER_TOKEN):
        credentials.append(BearerTokenCredential(values[ENV_BEARER_TOKEN]))

    result = CredentialSet(*credentials)
    logger.debug(f"load_credentials: kinds={[k.value for k in result.kinds]}")
    return result
