"""Auto-import builtin tool modules to trigger @register_tool decorators."""
from . import weather
from . import wikipedia
from . import calculator
