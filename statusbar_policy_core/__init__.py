"""Status bar indicator policy core.

Folds asynchronously changing platform signals into a stable set of status
indicators and the elevated-access list widget.
"""

__version__ = "0.1.0"

from .config import IndicatorResources, PolicyConfig, load_config
from .display import (
    BufferDisplay,
    CallbackDisplay,
    DisplayFacade,
    IndicatorCommand,
    NullDisplay,
    WidgetPublishCommand,
    WidgetUnpublishCommand,
)
from .errors import (
    ConfigLoadError,
    DisplayConnectionError,
    DisplayError,
    DisplayHandshakeError,
    DisplayTimeout,
    PackageNotFoundError,
    StatusBarPolicyError,
)
from .indicators import Indicator, IndicatorStore
from .policy import PolicySources, StatusBarPolicy
from .signals import SignalKind, SimCardState

__all__ = [
    "BufferDisplay",
    "CallbackDisplay",
    "ConfigLoadError",
    "DisplayConnectionError",
    "DisplayError",
    "DisplayFacade",
    "DisplayHandshakeError",
    "DisplayTimeout",
    "Indicator",
    "IndicatorCommand",
    "IndicatorResources",
    "IndicatorStore",
    "NullDisplay",
    "PackageNotFoundError",
    "PolicyConfig",
    "PolicySources",
    "SignalKind",
    "SimCardState",
    "StatusBarPolicy",
    "StatusBarPolicyError",
    "WidgetPublishCommand",
    "WidgetUnpublishCommand",
    "__version__",
    "load_config",
]
