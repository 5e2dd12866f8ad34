# Area: Generator
"""
Generator boundary - everything between the engine and the external
text generator.

This package handles:
- Context construction for generator callbacks
- Deadline enforcement
- Output schema validation
"""

from .context_builder import ContextBuilder, SERVICE_DEFINITIONS
from .callback_executor import execute_generator
from .timeout import run_with_deadline
from .validator import validate_output

__all__ = [
    "ContextBuilder",
    "SERVICE_DEFINITIONS",
    "execute_generator",
    "run_with_deadline",
    "validate_output",
]
