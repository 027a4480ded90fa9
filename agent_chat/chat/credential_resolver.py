"""Pick the stored API connection that best matches a canonical provider.

Service labels are free text typed by users ("openai", "OpenAI",
"open-ai-prod", ...), so matching is a cascade that loosens step by step.
The first step that matches wins:

1. exact, case-sensitive label
2. case-insensitive label
3. case-insensitive substring, in either direction
4. the first credential in listing order (when fallback is allowed)

An owner with zero credentials always resolves to ``NoCredentials``.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from agent_chat.models.chat_models import CredentialRecord

logger = logging.getLogger(__name__)


class MatchStep(str, enum.Enum):
    """Cascade step that produced a match."""

    EXACT = "exact"
    CASE_INSENSITIVE = "case_insensitive"
    SUBSTRING = "substring"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Found:
    """A credential was selected."""

    credential: CredentialRecord
    step: MatchStep


@dataclass(frozen=True)
class NoCredentials:
    """No credential can be used.

    ``reason`` is ``"empty"`` when the owner has none at all, or
    ``"no_match"`` when fallback is disabled and no label matched.
    """

    provider: str
    reason: str = "empty"


ResolveResult = Union[Found, NoCredentials]


@dataclass(frozen=True)
class ProviderMatch:
    """The credential chosen for an agent plus its canonical provider."""

    credential: CredentialRecord
    provider: str
    step: MatchStep


def _first(
    credentials: Sequence[CredentialRecord], provider: str, step: MatchStep
) -> Optional[CredentialRecord]:
    wanted = provider.strip().lower()
    for credential in credentials:
        label = credential.service
        if step is MatchStep.EXACT:
            if label == provider:
                return credential
            continue

        label = label.strip().lower()
        if not label:
            continue
        if step is MatchStep.CASE_INSENSITIVE and label == wanted:
            return credential
        if step is MatchStep.SUBSTRING and (wanted in label or label in wanted):
            return credential
    return None


def resolve_credential(
    credentials: Sequence[CredentialRecord],
    provider: str,
    *,
    allow_fallback: bool = True,
) -> ResolveResult:
    """Resolve the credential to use for ``provider``.

    Pure function: no I/O, no mutation of ``credentials``.

    Args:
        credentials: The owner's credentials, in listing order.
        provider: Canonical provider name (``openai`` or ``anthropic``).
        allow_fallback: Whether step 4 (first credential) may be used.

    Returns:
        ``Found`` with the credential and matching step, or ``NoCredentials``.
    """
    if not credentials:
        return NoCredentials(provider=provider, reason="empty")

    for step in (MatchStep.EXACT, MatchStep.CASE_INSENSITIVE, MatchStep.SUBSTRING):
        credential = _first(credentials, provider, step)
        if credential is not None:
            return Found(credential=credential, step=step)

    if not allow_fallback:
        return NoCredentials(provider=provider, reason="no_match")

    fallback = credentials[0]
    # Labels that match nothing may belong to a different provider.
    logger.warning(
        "credential_fallback_used: provider=%s, credential_id=%s, service=%s, candidates=%d",
        provider,
        fallback.id,
        fallback.service,
        len(credentials),
    )
    return Found(credential=fallback, step=MatchStep.FALLBACK)
