"""
Preferences and app-level settings kept next to the task collection.

Components:
- prefs_models.py: Preferences, AppSettings, StoreResult
- prefs_store.py: JSON-per-key stores over the shared key-value storage
"""
