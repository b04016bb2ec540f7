"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskDraft, Priority, Category)
- task_store.py: date-indexed store with write-through persistence
- task_views.py: pure derived views (filtering, calendar markers, stats)
"""
