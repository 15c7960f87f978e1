"""
Datadog Hub backend.

Shares community Dashboard/Monitor definitions through S3 + DynamoDB and
replays them into other Datadog accounts.
"""

__version__ = "0.1.0"
