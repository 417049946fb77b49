# =============================================================================
# backends/__init__.py
# =============================================================================
# Network-facing implementations of the core contracts:
#
#   mongo_catalog.py  →  TemplateCatalog over a MongoDB collection
#   nats_dispatch.py  →  Dispatcher publishing JSON events to NATS
#   rest.py           →  TemplateCatalog + Dispatcher over an HTTP API
#   context.py        →  opens the configured pair once, closes it on exit
#
# core/ never imports from here; only main.py and tools/ see concrete
# backends, and only through AdapterContext.
# =============================================================================
