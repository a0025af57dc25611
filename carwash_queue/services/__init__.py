"""
Services module for business logic separation.

- client_service: ClientRegistryService (one client per plate)
- wash_service: WashQueueService (registration, sweep, queue listing, status)
"""
