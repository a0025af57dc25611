"""Car wash queue backend: clients, wash registrations and the operator queue."""

__version__ = "1.0.0"
