"""
Auth method selection.
"""
import logging
from typing import Optional, Sequence

from ..errors import NoUsableCredentialError
from .credentials import Credential, CredentialKind, CredentialSet

logger = logging.getLogger(__name__)


def select_credential(
    acceptable: Sequence[CredentialKind],
    available: CredentialSet,
    now: Optional[float] = None,
) -> Credential:
    """
    Return the first acceptable kind the client holds a usable credential for.

    ``acceptable`` is ordered most preferred first.

    Raises:
        ValueError: ``acceptable`` is empty (an endpoint configuration bug)
        NoUsableCredentialError: nothing acceptable is held or usable
    """
    if not acceptable:
        raise ValueError("Endpoint declares no acceptable credential kinds")

    for kind in acceptable:
        credential = available.get(kind)
        if credential is None:
            continue
        if not credential.is_usable(now):
            logger.debug(f"select_credential: {kind.value} held but not usable, skipping")
            continue
        logger.debug(f"select_credential: selected {kind.value} from acceptable={[k.value for k in acceptable]}")
        return credential

    raise NoUsableCredentialError(acceptable, available.kinds)


class AuthMethodSelector:
    """Binds a CredentialSet so endpoints only pass their acceptable kinds."""

    def __init__(self, credentials: CredentialSet):
        self.credentials = credentials

    def select(self, acceptable: Sequence[CredentialKind], now: Optional[float] = None) -> Credential:
        return select_credential(acceptable, self.credentials, now)
