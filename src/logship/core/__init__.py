"""Core buffering, flush protocol, and ambient configuration."""
