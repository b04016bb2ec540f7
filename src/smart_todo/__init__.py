"""
smart_todo: a personal, date-indexed task tracker.

The core is the state and persistence layer (tasks, derived views, theme
preference, cached weather). Presentation lives in cli/ and connectors/.
"""
