"""Adapters connecting the reporter to CloudWatch, EC2 and a scheduler."""
