"""
Adapter layer for the S3 file store.

Contains the bucket-backed store, the folder organizer that works with it,
and the settings providers the storage options are persisted in.
"""
