"""
Task subsystem.

Components:
- task_models.py: data structures (Task, RunState, BusyPolicy, ExecutorEvent)
- task_errors.py: error hierarchy (SequentError and subclasses)
- task_registry.py: in-memory name -> Task storage
- task_resolver.py: dependency resolution into a flat execution sequence
- task_executor.py: sequential asyncio executor publishing lifecycle events
"""
