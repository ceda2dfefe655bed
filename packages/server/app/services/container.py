"""Wires the core components around one storage context."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from app.core.database import StorageContext
from app.services.fanclubs import FanclubRegistry
from app.services.memberships import MembershipLedger
from app.services.policy import AuthorizationPolicy
from app.services.posts import PostStore
from app.services.visibility import VisibilityGate


class ServiceContainer:
    def __init__(
        self,
        storage: StorageContext,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        if clock is None:
            self.ledger = MembershipLedger(storage)
        else:
            self.ledger = MembershipLedger(storage, clock=clock)
        self.registry = FanclubRegistry(storage, self.ledger)
        self.policy = AuthorizationPolicy(self.ledger)
        self.gate = VisibilityGate(self.ledger)
        self.posts = PostStore(storage, self.policy, self.gate)
