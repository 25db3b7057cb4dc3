"""
Upstream data source module.

Async client for the public gamma market API.
"""
