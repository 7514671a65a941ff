from .logging import get_logger, apply_log_level

__all__ = ["get_logger", "apply_log_level"]
