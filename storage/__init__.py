"""
Storage Package.

Persistence of blocks and canonical on-chain records.

Modules:
- database: Engine and transaction boundaries
- models/: ORM tables
- repositories/: Data access layer
- event_store: RecordStore implementation used by the sync engine
"""
