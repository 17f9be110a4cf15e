from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import AliasChoices

from app.config.settings import ProviderSettings
from app.providers.base import ProviderRole

logger = logging.getLogger(__name__)

_CREDENTIAL_FIELDS: dict[ProviderRole, str] = {
    ProviderRole.REGIONAL: "brapi_api_key",
    ProviderRole.GENERAL: "finnhub_api_key",
    ProviderRole.QUOTA_LIMITED: "alpha_vantage_api_key",
}


def _alias_names(field_name: str) -> set[str]:
    alias = ProviderSettings.model_fields[field_name].validation_alias
    if isinstance(alias, AliasChoices):
        return {choice for choice in alias.choices if isinstance(choice, str)}
    if isinstance(alias, str):
        return {alias}
    return set()


def _secret_names(field_name: str) -> set[str]:
    names = {field_name} | _alias_names(field_name)
    return {name.casefold() for name in names}


def resolve_credential(
    value: str | None,
    secret_names: set[str],
    placeholder_tokens: list[str],
    min_length: int,
) -> str | None:
    """Return the usable secret, or None when it is missing or a placeholder."""
    if not value:
        return None
    cleaned = value.strip()
    if len(cleaned) < min_length:
        return None
    folded = cleaned.casefold()
    if folded in secret_names:
        return None
    if folded in {token.casefold() for token in placeholder_tokens}:
        return None
    return cleaned


def resolve_credentials(provider_settings: ProviderSettings) -> dict[ProviderRole, str]:
    credentials: dict[ProviderRole, str] = {}
    for role, field_name in _CREDENTIAL_FIELDS.items():
        credential = resolve_credential(
            getattr(provider_settings, field_name),
            _secret_names(field_name),
            provider_settings.placeholder_tokens,
            provider_settings.min_key_length,
        )
        if credential is None:
            logger.info("%s is not configured; %s provider disabled", field_name, role.value)
            continue
        credentials[role] = credential
    return credentials


def credential_sources(
    credentials: dict[ProviderRole, str],
    secrets_dir: str | Path | None = None,
) -> dict[ProviderRole, str]:
    """Name where each resolved key was found, without exposing the key.

    ``env`` wins over ``secrets_dir``, matching the settings source order.
    Anything else (``.env`` file, constructor value) is reported as ``settings``.
    """
    if secrets_dir is None:
        secrets_dir = ProviderSettings.model_config.get("secrets_dir")
    environ = {name.casefold() for name, value in os.environ.items() if value}
    secret_files: set[str] = set()
    if secrets_dir is not None and Path(secrets_dir).is_dir():
        secret_files = {
            entry.name.casefold() for entry in Path(secrets_dir).iterdir() if entry.is_file()
        }

    sources: dict[ProviderRole, str] = {}
    for role in credentials:
        names = {name.casefold() for name in _alias_names(_CREDENTIAL_FIELDS[role])}
        if names & environ:
            sources[role] = "env"
        elif names & secret_files:
            sources[role] = "secrets_dir"
        else:
            sources[role] = "settings"
    return sources
