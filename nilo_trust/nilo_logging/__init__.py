"""
Structured logging for Nilo Trust.

JSON logs with timestamp, event_type, target and flags.
Use get_logger() in all engine modules for aggregation-friendly output.
"""

from nilo_trust.nilo_logging.logger import get_logger, short_target_id, target_context

__all__ = ["get_logger", "short_target_id", "target_context"]
