"""Application layer: policy evaluation and the in-process caching tiers."""
