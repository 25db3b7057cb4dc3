"""
Runtime state module.

Holds the per-asset order book arena fed by the ingestion stream and the
refresh schedulers that publish periodically recomputed snapshots.
"""
