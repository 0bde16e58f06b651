"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus)
- task_list.py: view-model mirroring the live query (sequence + selection)
"""
