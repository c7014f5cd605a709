"""
Events Sync.

Indexing, normalization and reconciliation of NFT marketplace
events. Entry points:

- events_sync.orchestrator: EventsSyncOrchestrator, create_orchestrator
- events_sync.cli: `events-sync` command
"""

__version__ = "0.1.0"
