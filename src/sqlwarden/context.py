"""Execution context handed to the handler by the host runtime."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from sqlwarden.adapters import GatewayClient
from sqlwarden.config import SkillConfig


@dataclass
class SkillContext:
    provider_client: GatewayClient | None = None
    gateway_client: GatewayClient | None = None
    config: SkillConfig = field(default_factory=SkillConfig)

    def __post_init__(self) -> None:
        if not isinstance(self.config, SkillConfig):
            self.config = SkillConfig.from_mapping(self.config)

    @classmethod
    def coerce(cls, context: SkillContext | Mapping[str, object] | None) -> SkillContext:
        """Accept a SkillContext or the runtime's plain mapping form."""
        if isinstance(context, SkillContext):
            return context
        if not context:
            return cls()
        return cls(
            provider_client=context.get("providerClient", context.get("provider_client")),
            gateway_client=context.get("gatewayClient", context.get("gateway_client")),
            config=context.get("config"),
        )
