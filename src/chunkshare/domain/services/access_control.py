"""Share access control.

An object is readable by its owner, or by anyone once it is published.
The check runs before any chunk fetch on the read path; the download
counter is gated by the same rule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from chunkshare.domain.entities.file_object import FileObject
from chunkshare.domain.errors import PermissionDenied
from chunkshare.domain.value_objects.identifiers import is_anonymous
from chunkshare.ports.outbound import StorageGatewayPort, UnauthenticatedError

logger = logging.getLogger(__name__)


def can_read(caller: str, obj: FileObject) -> bool:
    """Return True if ``caller`` may read ``obj``."""
    return caller == obj.owner or obj.is_shared


class AccessView(Enum):
    """Which view a read was authorized under."""
    OWNER = "owner"
    SHARED = "shared"


@dataclass
class AccessDecision:
    """Outcome of an authorized lookup."""

    file_id: str
    view: AccessView
    metadata: Optional[FileObject] = None  # Only set for the owner view

    @property
    def is_owner(self) -> bool:
        return self.view is AccessView.OWNER


class ShareAccessController:
    """Decides whether the gateway's principal may read a file.

    Lookup is two-step: the owner's authoritative listing first, then the
    published flag. Only "not the owner" (including anonymous callers) falls
    through to the second step; every other failure propagates.
    """

    def __init__(self, gateway: StorageGatewayPort):
        self._gateway = gateway

    def find_owned(self, file_id: str) -> Optional[FileObject]:
        """Return the caller's authoritative record for ``file_id``, if owned."""
        caller = self._gateway.principal
        if is_anonymous(caller):
            return None
        try:
            owned = self._gateway.get_owned_objects()
        except UnauthenticatedError:
            return None
        return next((obj for obj in owned if obj.id == file_id), None)

    def authorize_read(self, file_id: str, owned: Optional[FileObject] = None) -> AccessDecision:
        """Authorize a read of ``file_id``.

        Args:
            file_id: File identifier.
            owned: Owner record, if the caller already looked it up.

        Raises:
            PermissionDenied: If the caller is not the owner and the file is
                not published (unknown ids look the same).
        """
        if owned is None:
            owned = self.find_owned(file_id)
        if owned is not None and can_read(self._gateway.principal, owned):
            return AccessDecision(file_id=file_id, view=AccessView.OWNER, metadata=owned)

        if self._gateway.is_published(file_id):
            return AccessDecision(file_id=file_id, view=AccessView.SHARED)

        logger.info(f"Denied read of {file_id} for {self._gateway.principal}")
        raise PermissionDenied(file_id, "file is not shared")
