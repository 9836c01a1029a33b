"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority) + JSON record codec
- task_actions.py: the closed set of actions the store understands
- task_reducer.py: pure state transition (tasks, action) -> tasks
- task_storage.py: durable key-value slots (JSON files, SQLite)
- task_persistence.py: snapshot encode/decode, hydration, ordered async writer
- task_store.py: owned state container that dispatches actions
- task_api.py: small high-level helpers used by intent sources and views
"""
