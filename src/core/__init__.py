"""Orchestration core: domain, Project State, resolution and services."""
