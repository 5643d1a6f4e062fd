"""Services for business logic."""
