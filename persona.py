"""Persona config loader.

Each companion persona has a YAML file under personas/ that declares the
character, its timings and texts inline and references secret values by env
var name. Call load_persona() with the path from the COMPANION_CONFIG
environment variable.

Usage:
    persona = load_persona(os.environ.get("COMPANION_CONFIG", DEFAULT_PERSONA_PATH))
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

import yaml
from dotenv import load_dotenv

from clients.naas import DEFAULT_ENDPOINT_URL, DEFAULT_TIMEOUT_SECONDS
from clients.openai_client import DEFAULT_MODEL
from companion.settings import CompanionTexts, IndicatorMode, Timings

load_dotenv()

DEFAULT_PERSONA_PATH = str(Path(__file__).parent / "personas" / "rusty.yaml")
REPLY_CLIENT_KINDS = ("naas", "openai")


@dataclass
class ReplyClientConfig:
    kind: str = "naas"
    endpoint_url: str = DEFAULT_ENDPOINT_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    model: str = DEFAULT_MODEL
    openai_api_key: str = ""


@dataclass
class DepartureConfig:
    discord_webhook_url: str
    discord_role_id: str = ""
    message_prefix: str = ""


@dataclass
class PersonaConfig:
    persona_id: str
    companion_name: str
    bank_path: Path | None
    reply_client: ReplyClientConfig
    timings: Timings
    texts: CompanionTexts
    typing_indicator: IndicatorMode
    departure: DepartureConfig | None
    agent_seed_env_key: str = "AGENT_SEED_PHRASE"


def resolve_env(key_name: str, source: str = "") -> str:
    """Return a required env var's value, or exit naming what referenced it."""
    val = (os.environ.get(key_name) or "").strip()
    if not val:
        where = f" (referenced in {source})" if source else ""
        sys.exit(f"Missing required env var '{key_name}'{where}")
    return val


def load_persona(config_path: str) -> PersonaConfig:
    """Read a persona YAML and turn it into a PersonaConfig.

    The OpenAI key and the Discord webhook URL are looked up by env var name,
    and only when the persona uses them (kind: openai, a departure block).
    Any problem stops the process with a message saying what to fix.
    """
    if not config_path:
        sys.exit("COMPANION_CONFIG environment variable is not set.")

    path = Path(config_path)
    if not path.exists():
        sys.exit(f"Persona config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        sys.exit(f"Invalid persona config {path}: top level must be a mapping")

    def _env(key_name: str) -> str:
        return resolve_env(key_name, str(path))

    def _section(name: str) -> dict:
        # An empty section ("departure:") loads as None.
        value = raw.get(name) or {}
        if not isinstance(value, dict):
            sys.exit(f"Invalid persona config {path}: '{name}' must be a mapping")
        return value

    companion = _section("companion")
    client_raw = _section("reply_client")
    kind = client_raw.get("kind", "naas")
    if kind not in REPLY_CLIENT_KINDS:
        sys.exit(f"Unknown reply_client.kind {kind!r} in {path}; expected one of {REPLY_CLIENT_KINDS}")

    try:
        persona_id = str(raw["persona_id"])
        reply_client = ReplyClientConfig(
            kind=kind,
            endpoint_url=client_raw.get("endpoint_url", DEFAULT_ENDPOINT_URL),
            timeout_seconds=float(client_raw.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
            model=client_raw.get("model", DEFAULT_MODEL),
            openai_api_key=(
                _env(client_raw.get("openai_api_key_env_key", "OPENAI_API_KEY"))
                if kind == "openai"
                else ""
            ),
        )
        timings = Timings(**_section("timings"))
        texts = CompanionTexts(**_section("texts"))
        indicator = IndicatorMode(raw.get("typing_indicator", IndicatorMode.SHARED.value))

        departure = None
        hook = _section("departure").get("discord_webhook")
        if hook:
            departure = DepartureConfig(
                discord_webhook_url=_env(hook["webhook_url_env_key"]),
                discord_role_id=str(hook.get("mention_role_id", "")),
                message_prefix=hook.get("message_prefix", ""),
            )
    except KeyError as e:
        sys.exit(f"Invalid persona config {path}: missing key {e}")
    except (TypeError, ValueError, AttributeError) as e:
        sys.exit(f"Invalid persona config {path}: {e}")

    bank_path = _section("responses").get("bank_path")
    if bank_path:
        bank_path = Path(bank_path)
        if not bank_path.is_absolute():
            bank_path = path.parent / bank_path

    return PersonaConfig(
        persona_id=persona_id,
        companion_name=companion.get("name", persona_id),
        bank_path=bank_path,
        reply_client=reply_client,
        timings=timings,
        texts=texts,
        typing_indicator=indicator,
        departure=departure,
        agent_seed_env_key=_section("agent").get("seed_env_key", "AGENT_SEED_PHRASE"),
    )
