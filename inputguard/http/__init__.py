"""Response hardening for the InputGuard service: security headers and request body cap."""
