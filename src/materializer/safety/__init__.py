"""Directory safety checks."""

from .guard import GuardDecision, check_target_directory, is_dir_empty

__all__ = ["GuardDecision", "check_target_directory", "is_dir_empty"]
