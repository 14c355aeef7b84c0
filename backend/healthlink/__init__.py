"""HealthLink backend."""
