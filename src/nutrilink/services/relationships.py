"""Coach and client linking."""

import logging
from dataclasses import dataclass

from nutrilink.domain.models import Account, Coach, link_coach, unlink_coach
from nutrilink.services.store import EntityStore

_logger = logging.getLogger(__name__)


@dataclass
class RelationshipService:
    """The only way to create or break a coach link."""

    store: EntityStore

    def connect(self, account: Account, coach: Coach) -> None:
        """Link an account to a coach, replacing any previous coach."""
        previous = account.coach
        link_coach(account, coach)
        self.store.commit()
        if previous is not None and previous is not coach:
            _logger.info(
                "Moved %s from coach %s to %s", account.email, previous.email, coach.email
            )
        else:
            _logger.info("Connected %s to coach %s", account.email, coach.email)

    def disconnect(self, account: Account) -> None:
        """Unlink an account from its coach; no-op when not linked."""
        coach = unlink_coach(account)
        if coach is None:
            return
        self.store.commit()
        _logger.info("Disconnected %s from coach %s", account.email, coach.email)

    def clients_of(self, coach: Coach) -> list[Account]:
        return sorted(coach.clients, key=lambda client: client.username.lower())
