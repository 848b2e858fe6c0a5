"""Core building blocks: token storage, session state and the API layer."""
