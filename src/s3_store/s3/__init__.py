"""boto3 client construction for the bucket the store writes to."""
