"""
This module loads the process-wide configuration for the AyurCare application.

Settings are resolved once at startup and passed explicitly to the services that need
them (the analysis dispatcher and the record store), which keeps them easy to replace
in tests.

Lookup order for every key:
1. Streamlit secrets (`.streamlit/secrets.toml`), where API keys are meant to live.
2. Environment variables.
3. The defaults below.
"""
# ayurcare/config.py

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

import streamlit as st
from streamlit.errors import StreamlitSecretNotFoundError

logger = logging.getLogger(__name__)

AI_SERVICES = ('openai', 'claude', 'mock')
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class AppConfig:
    """Resolved application settings.

    Attributes:
        ai_service (str): Analysis backend, one of AI_SERVICES.
        openai_api_key (str): Credential for the OpenAI backend.
        anthropic_api_key (str): Credential for the Claude backend.
        openai_model (str): Chat completion model name.
        anthropic_model (str): Messages API model name.
        mock_delay_seconds (float): Simulated latency of the mock backend.
        request_timeout_seconds (float): Transport timeout for provider calls.
        data_file (str): Path of the encrypted record store.
        key_file (str): Path of the Fernet key.
        log_level (str): Root logging level name.
    """
    ai_service: str = 'mock'
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_model: str = 'gpt-4'
    anthropic_model: str = 'claude-3-sonnet-20240229'
    mock_delay_seconds: float = 3.0
    request_timeout_seconds: float = 60.0
    data_file: str = 'records.json'
    key_file: str = 'secret.key'
    log_level: str = 'INFO'


def _read_streamlit_secrets() -> Mapping:
    """Returns Streamlit secrets, or an empty mapping when none are configured."""
    try:
        return dict(st.secrets)
    except (FileNotFoundError, StreamlitSecretNotFoundError) as e:
        logger.debug("Streamlit secrets unavailable: %s", e)
        return {}


def _as_float(raw, default: float, key: str) -> float:
    if raw in (None, ''):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid value %r for %s, using default %s", raw, key, default)
        return default
    if value < 0:
        logger.warning("Negative value %r for %s, using default %s", raw, key, default)
        return default
    return value


def load_config(secrets: Optional[Mapping] = None, environ: Optional[Mapping] = None) -> AppConfig:
    """Builds the application configuration.

    Args:
        secrets: Mapping that takes precedence over the environment. Defaults to the
            Streamlit secrets.
        environ: Environment mapping. Defaults to `os.environ`.

    Returns:
        AppConfig: The resolved settings.
    """
    if secrets is None:
        secrets = _read_streamlit_secrets()
    if environ is None:
        environ = os.environ

    def get(key, default=None):
        value = secrets.get(key)
        if value in (None, ''):
            value = environ.get(key)
        if value in (None, ''):
            return default
        return value

    defaults = AppConfig()
    ai_service = str(get('AI_SERVICE', defaults.ai_service)).strip().lower()
    if ai_service not in AI_SERVICES:
        logger.warning("Unknown AI_SERVICE %r, falling back to the mock backend", ai_service)
        ai_service = 'mock'

    return AppConfig(
        ai_service=ai_service,
        openai_api_key=get('OPENAI_API_KEY'),
        anthropic_api_key=get('ANTHROPIC_API_KEY'),
        openai_model=get('OPENAI_MODEL', defaults.openai_model),
        anthropic_model=get('ANTHROPIC_MODEL', defaults.anthropic_model),
        mock_delay_seconds=_as_float(get('MOCK_DELAY_SECONDS'), defaults.mock_delay_seconds, 'MOCK_DELAY_SECONDS'),
        request_timeout_seconds=_as_float(
            get('REQUEST_TIMEOUT_SECONDS'), defaults.request_timeout_seconds, 'REQUEST_TIMEOUT_SECONDS'
        ),
        data_file=get('DATA_FILE', defaults.data_file),
        key_file=get('KEY_FILE', defaults.key_file),
        log_level=str(get('LOG_LEVEL', defaults.log_level)).upper(),
    )


def configure_logging(level: str = 'INFO') -> None:
    """Configures root logging once for the Streamlit process."""
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
