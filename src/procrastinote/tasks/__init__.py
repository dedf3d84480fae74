"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Category, TaskStatus) and validation
- task_store.py: SQLite-backed storage + query/update helpers
- task_stats.py: pure aggregations (time/count per category, completion rate)
- task_api.py: high-level operations used by the rest of the app
"""
