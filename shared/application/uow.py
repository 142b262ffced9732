"""
Unit of Work Pattern

Wraps the "read snapshot, decide, write" sequence of an assignment in one
database transaction and publishes domain events only after it commits.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""

    @abstractmethod
    def collect_events(self, aggregate):
        """Collect events from aggregate root"""


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            apartment = apartment_repo.get(apartment_id, lock=True)
            bookings = booking_repo.list_for_apartment(apartment.id)

            booking.assign_to_apartment(apartment.id, actor_id=user.id)
            uow.collect_events(booking)
            booking_repo.save(booking)
        # BookingAssigned is published after commit

    Row locks taken inside the block (SELECT ... FOR UPDATE) are held until
    the transaction ends, which serialises concurrent writers per apartment.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        """
        Schedule collected events for publishing

        transaction.on_commit() defers publishing until the outermost
        transaction has committed.
        """
        logger.debug("Committing unit of work with %d events", len(self._events))

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Discard events; the atomic block rolls back the writes"""
        if self._events:
            logger.warning("Rolling back unit of work, discarding %d events", len(self._events))
        self._events.clear()

    def collect_events(self, aggregate):
        """Move pending events from an aggregate root into this unit of work"""
        new_events = getattr(aggregate, 'events', None)
        if new_events:
            self._events.extend(new_events)
            aggregate.clear_events()
            logger.debug(
                "Collected %d events from %s (ID: %s)",
                len(new_events), aggregate.__class__.__name__, aggregate.id,
            )

    def record_event(self, event: DomainEvent):
        """Queue an event that does not belong to a single aggregate"""
        self._events.append(event)

    def _publish_events(self, events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info("Publishing %d domain events after commit", len(events))

        try:
            message_bus.publish_events(events)
        except Exception:
            # The writes are already committed; a publishing failure only loses side effects.
            logger.exception("Error publishing domain events")
