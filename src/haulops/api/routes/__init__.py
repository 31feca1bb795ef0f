"""Route group exports."""

from . import health, payroll, routes

__all__ = ["routes", "payroll", "health"]
