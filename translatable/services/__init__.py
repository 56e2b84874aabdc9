"""Translation engine services: classification, validation, cache, store, resolver."""
