"""AWS helpers: ARN parsing and boto3 client construction."""
