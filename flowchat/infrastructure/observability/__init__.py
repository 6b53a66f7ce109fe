from .logging import setup_logging, setup_logging_from_settings, bind_turn_context, clear_turn_context

__all__ = ["setup_logging", "setup_logging_from_settings", "bind_turn_context", "clear_turn_context"]
