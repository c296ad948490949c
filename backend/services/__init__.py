"""Domain services: adapters, derivation pipeline, CRUD orchestration, notifier."""
