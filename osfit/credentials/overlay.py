"""
Credential overlay: a user's own key masks the system-wide default.

Effective credentials are computed per request and never cached, so a key
swap or a different user on the next request can never see stale keys.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from osfit.config import BUILTIN_PROVIDERS

DEFAULT_PROVIDER = "gemini"


@dataclass(frozen=True)
class Credential:
    key: str
    source: str  # "user" | "system"

    def __repr__(self) -> str:
        # Keys must never end up in logs through a repr
        return f"Credential(source={self.source!r})"


@dataclass(frozen=True)
class EffectiveCredentials:
    gemini: Optional[Credential] = None
    groq: Optional[Credential] = None
    lingo: Optional[Credential] = None
    provider: str = DEFAULT_PROVIDER

    def for_service(self, service: str) -> Optional[Credential]:
        if service not in ("gemini", "groq", "lingo"):
            raise ValueError(f"Unknown service: {service}")
        return getattr(self, service)

    def generative_provider(self) -> Optional[str]:
        """
        Provider to use for generation: the selected one when it has a key,
        otherwise any other provider that has one.
        """
        if self.for_service(self.provider) is not None:
            return self.provider
        for provider in BUILTIN_PROVIDERS:
            if self.for_service(provider) is not None:
                return provider
        return None

    def has_generative_key(self) -> bool:
        return self.generative_provider() is not None

    def sources(self) -> Dict[str, str]:
        """Where each credential came from, for error reporting."""
        return {
            service: (credential.source if credential else "none")
            for service, credential in (("gemini", self.gemini), ("groq", self.groq), ("lingo", self.lingo))
        }


def resolve_credential(user_value: Optional[str], system_value: Optional[str]) -> Optional[Credential]:
    """User value wins when present, then the system value, else nothing."""
    if user_value:
        return Credential(key=user_value, source="user")
    if system_value:
        return Credential(key=system_value, source="system")
    return None


def get_effective_credentials(user_keys, system_keys: Dict[str, Optional[str]],
                              default_provider: str = DEFAULT_PROVIDER) -> EffectiveCredentials:
    """
    Overlay decrypted user keys on the system defaults.

    Args:
        user_keys: UserApiKeys from the vault, or None for anonymous requests.
        system_keys: Mapping of service name to system key (see config.get_system_api_keys).
        default_provider: Provider used when the user has not picked one.
    """
    provider = default_provider if default_provider in BUILTIN_PROVIDERS else DEFAULT_PROVIDER
    if user_keys is not None and user_keys.ai_provider in BUILTIN_PROVIDERS:
        provider = user_keys.ai_provider

    def user_value(service: str) -> Optional[str]:
        return getattr(user_keys, f"{service}_key") if user_keys is not None else None

    return EffectiveCredentials(
        gemini=resolve_credential(user_value("gemini"), system_keys.get("gemini")),
        groq=resolve_credential(user_value("groq"), system_keys.get("groq")),
        lingo=resolve_credential(user_value("lingo"), system_keys.get("lingo")),
        provider=provider,
    )
