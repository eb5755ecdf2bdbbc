"""
ICSR Causality Bridge Configuration
======================================
Structured-prompt bridge between ICSR case data and an external LLM.
- Provider: Anthropic Messages API
- Read once at startup; the gateway receives an immutable GatewayConfig
"""

import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

# Project root: directory containing this config.py file
PROJECT_ROOT = str(Path(__file__).resolve().parent)

# Load .env file (override=True to ensure .env values take precedence)
load_dotenv(override=True)

# --- API Configuration ---
ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY")
ANTHROPIC_MODEL = os.environ.get("ICSR_MODEL", "claude-sonnet-4-20250514")
MAX_TOKENS = 4096
REQUEST_TIMEOUT_SEC = 120.0

# Per-task sampling temperatures (low = conservative clinical output)
CAUSALITY_TEMPERATURE = 0.2
INTERACTION_TEMPERATURE = 0.3

# --- Output Configuration (relative to PROJECT_ROOT) ---
RESULTS_PATH = os.path.join(PROJECT_ROOT, "results")
REPORTS_PATH = os.path.join(PROJECT_ROOT, "reports")
LOGS_PATH = os.path.join(PROJECT_ROOT, "logs")

# Fixed text shown instead of the app when the key is missing
CONFIGURATION_ERROR_MESSAGE = (
    "Configuration Error: the Anthropic API key has not been configured.\n"
    "Add ANTHROPIC_API_KEY=<your key> to a .env file in the project root\n"
    "(or export it in the environment) and restart."
)


@dataclass(frozen=True)
class GatewayConfig:
    """Immutable startup configuration handed to the LLM gateway."""

    api_key: str | None
    model: str = ANTHROPIC_MODEL
    max_tokens: int = MAX_TOKENS
    timeout: float = REQUEST_TIMEOUT_SEC

    def is_api_key_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


def load_config(env: dict | None = None) -> GatewayConfig:
    """Build the gateway config from the environment (or an explicit mapping)."""
    if env is None:
        return GatewayConfig(api_key=ANTHROPIC_API_KEY, model=ANTHROPIC_MODEL)
    return GatewayConfig(
        api_key=env.get("ANTHROPIC_API_KEY"),
        model=env.get("ICSR_MODEL", ANTHROPIC_MODEL),
    )


def is_api_key_configured(env: dict | None = None) -> bool:
    return load_config(env).is_api_key_configured()
