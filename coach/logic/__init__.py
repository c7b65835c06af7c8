"""Core business logic layer.

Subpackages:
- calendar: month/week grids and the entry index
- planner: entry mutations and the calendar view state
- reporting: completion and nutrition summaries, portion scaling
"""
__all__ = ["calendar", "planner", "reporting"]
