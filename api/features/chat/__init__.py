"""Chat feature package: entities, store, completion, service, controller, router.

Stores conversations and messages in PostgreSQL and replays the trailing
window of a conversation to the hosted completion model on every turn.
"""
