"""
todo-titans: a to-do client over a hosted backend.

Components:
- tasks/: Task record and the task list view-model
- home/: home screen controller and the 7-day date strip
- auth/: sign-in, sign-up and password-reset controllers
- backends/: Firebase REST adapters and the offline demo backend
- connectors/: console client driving the controllers
"""

__version__ = "0.1.0"
