"""Store a host application's files in Amazon S3 instead of local disk."""
