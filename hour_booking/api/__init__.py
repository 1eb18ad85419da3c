"""HTTP routes served by the OAuth callback listener."""
