"""Service layer: domain operations over the async ORM session."""
