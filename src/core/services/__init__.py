"""Application services: command dispatch and batch test orchestration."""
