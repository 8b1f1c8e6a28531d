"""Security checks applied to records before they are persisted."""
