"""
Message Bus

Routes booking commands to their handlers and domain events to their
subscribers (the audit trail, for now).
"""

from typing import Dict, List, Callable, Type, Any
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class MessageBus:
    """
    Message bus for commands and events

    Commands: One handler per command (1:1)
    Events: Multiple handlers per event (1:N)
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._command_handlers: Dict[Type, Callable] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ):
        """
        Register an event handler

        Registering the same handler twice is a no-op, so AppConfig.ready()
        may run more than once without duplicating side effects.
        """
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug("Registered event handler %s for %s", handler.__name__, event_type.__name__)

    def register_command_handler(
        self,
        command_type: Type,
        handler: Callable[[Any], Any]
    ):
        """
        Register a command handler

        Only one handler can be registered per command type; re-registering
        the same callable is allowed.
        """
        existing = self._command_handlers.get(command_type)
        if existing is not None and existing != handler:
            raise ValueError(
                f"Handler for {command_type.__name__} is already registered. "
                "Commands can have only one handler."
            )
        self._command_handlers[command_type] = handler
        logger.debug("Registered command handler for %s", command_type.__name__)

    def handle_command(self, command: Any) -> Any:
        """
        Handle a command

        Returns the result from the command handler. Domain errors raised by
        the handler propagate to the caller unchanged.
        """
        command_type = type(command)
        handler = self._command_handlers.get(command_type)

        if not handler:
            raise ValueError(
                f"No handler registered for command {command_type.__name__}"
            )

        logger.info("Handling command: %s", command_type.__name__)
        try:
            return handler(command)
        except Exception as e:
            logger.warning("Command %s failed: %s", command_type.__name__, e)
            raise

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events

        All registered handlers for each event type are called.
        Errors in handlers are logged but don't stop other handlers.
        """
        for event in events:
            event_type = type(event)
            handlers = self._event_handlers.get(event_type, [])

            if not handlers:
                logger.debug("No handlers registered for event %s", event_type.__name__)
                continue

            logger.info("Publishing event: %s (ID: %s)", event_type.__name__, event.event_id)

            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "Error in event handler %s for event %s",
                        handler.__name__, event_type.__name__,
                    )


# Global message bus instance
message_bus = MessageBus()
