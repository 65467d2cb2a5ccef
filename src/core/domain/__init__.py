"""Domain models, errors and verbosity levels.

Pure data and error types: no YAML, subprocesses or CLI here.
"""
