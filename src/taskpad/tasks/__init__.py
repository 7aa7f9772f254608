"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Reminder, Category, Priority, results)
- task_store.py: whole-collection JSON store + derived queries
- task_api.py: caller-side helpers (validation, reminders, list filtering/sorting)
"""
