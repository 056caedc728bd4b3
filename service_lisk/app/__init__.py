"""
Cached client package for the Lisk payments API.

Every resource reads through a shared ephemeral cache, invalidates it after
mutations and reports outcomes through self-clearing status indicators
instead of raising.

Structure:
- app.caching: Ephemeral cache and its storage media.
- app.status: Transient loading/error/message status.
- app.accessor: Read-through and write-then-invalidate operations.
- app.adapters: Lisk API client and one resource per API area.
- app.session: Composition root wiring all of the above.
"""
