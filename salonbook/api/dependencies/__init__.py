"""FastAPI dependencies: database session, acting party, services."""
