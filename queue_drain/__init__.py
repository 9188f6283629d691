"""Drain a batch of SQS messages into another queue and/or an S3 bucket."""

__version__ = "0.1.0"
