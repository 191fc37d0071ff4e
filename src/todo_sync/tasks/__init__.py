"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, LoadState, SyncState)
- task_errors.py: error taxonomy (storage, remote fetch, validation, not found)
- task_store.py: SQLite-backed storage + query/update helpers
- task_remote.py: read-only HTTP task source and payload decoding
- task_reconciler.py: first-load import, remote merge, CRUD, filtering
"""
