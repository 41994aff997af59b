from .catalog import Severity, StatusCatalog, default_catalog
from .controller import OrderLifecycleController, ViewState
from .gateway import TransitionGateway, TransitionResult
from .notifications import Notification, NotificationCenter, NotificationLevel, Notifier
from .record import ActionKind, OrderRecord
from .timeline import Timeline, TimelineBuilder, TimelineStep

__all__ = [
    # Status registry
    "Severity",
    "StatusCatalog",
    "default_catalog",
    # Timeline
    "Timeline",
    "TimelineBuilder",
    "TimelineStep",
    # Transitions
    "ActionKind",
    "OrderRecord",
    "TransitionGateway",
    "TransitionResult",
    # Notifications
    "Notification",
    "NotificationCenter",
    "NotificationLevel",
    "Notifier",
    # Controller
    "OrderLifecycleController",
    "ViewState",
]
