"""Per-request resolution options."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

__all__ = ["ResolutionOptions"]

_NAMED_KEYS = ("node", "links", "ipaddress")


@dataclass(frozen=True)
class ResolutionOptions:
    """Options supplied by the caller of a find/search/authorized request.

    Attributes:
        node: Name of the requesting node; selects the environment.
        links: How symlinks are handled by returned instances ('manage' or 'follow').
        ipaddress: Address of the requesting client, used for authorization.
        extra: Any other keys, passed through untouched to directory expansion.
    """

    node: str | None = None
    links: str | None = None
    ipaddress: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(
        cls, options: ResolutionOptions | Mapping[str, Any] | None = None
    ) -> ResolutionOptions:
        """Build options from a mapping, or return an existing instance as-is."""
        if isinstance(options, ResolutionOptions):
            return options
        if options is None:
            return cls()
        named = {key: options[key] for key in _NAMED_KEYS if key in options}
        extra = {key: value for key, value in options.items() if key not in _NAMED_KEYS}
        return cls(extra=extra, **named)

    def expansion_options(self) -> dict[str, Any]:
        """Options forwarded to the directory expander.

        The caller's extra keys plus ``links`` when one was given. ``node``
        and ``ipaddress`` identify the requester and are not forwarded.
        """
        forwarded = dict(self.extra)
        if self.links is not None:
            forwarded["links"] = self.links
        return forwarded
