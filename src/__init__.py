"""CloudFront + S3 static sites."""
