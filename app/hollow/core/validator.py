"""Pre-flight validation of configured roots.

Before a scan starts, every configured root identifier is resolved
through the storage browser. Roots that cannot be resolved are skipped
with a diagnostic; the rest become the scan's roots in configured order.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from hollow.browsers.base import BrowserError, StorageBrowser
from hollow.models.scan_state import Root

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RootFailure:
    """A configured root that could not be resolved.

    Attributes:
        identifier: The configured identifier.
        reason: Why it was rejected.
    """

    identifier: str
    reason: str


@dataclass(frozen=True, slots=True)
class RootValidation:
    """Outcome of validating the configured roots.

    Attributes:
        roots: Resolved roots, in input order.
        failures: Rejected identifiers, in input order.
    """

    roots: list[Root] = field(default_factory=list)
    failures: list[RootFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when at least one root resolved."""
        return bool(self.roots)


def validate_roots(root_ids: Iterable[str], browser: StorageBrowser) -> RootValidation:
    """Resolve each candidate root identifier to a folder.

    A failing root never stops validation of the remaining ones.

    Args:
        root_ids: Candidate identifiers, in scan order.
        browser: Storage browser used to resolve them.

    Returns:
        RootValidation with the resolved roots and the failures.
    """
    roots: list[Root] = []
    failures: list[RootFailure] = []

    for raw_id in root_ids:
        root_id = raw_id.strip()
        if not root_id:
            failures.append(RootFailure(identifier=raw_id, reason="malformed identifier"))
            logger.warning("Skipping root %r: malformed identifier", raw_id)
            continue

        try:
            meta = browser.resolve_folder(root_id)
        except BrowserError as e:
            failures.append(RootFailure(identifier=root_id, reason=e.reason))
            logger.warning("Skipping root %s: %s", root_id, e.reason)
            continue

        roots.append(Root(identifier=meta.folder_id, display_name=meta.name, fully_queued=False))
        logger.info("Root %s resolved to %r", root_id, meta.name)

    return RootValidation(roots=roots, failures=failures)
