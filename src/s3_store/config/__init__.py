"""
Configuration management for the S3 file store.

Contains the process-level Pydantic settings and the per-bucket storage
configuration that is read from a settings provider.
"""
