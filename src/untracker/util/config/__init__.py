# Config dataclass exports.
# Re-export config dataclasses so callers can do:
#   from untracker.util.config import RenderConfig, ...

from .logging import LoggingConfig
from .render import RenderConfig, resolve_render_config
from .writing import WritingConfig

__all__ = [
    "LoggingConfig",
    "RenderConfig",
    "WritingConfig",
    "resolve_render_config",
]
