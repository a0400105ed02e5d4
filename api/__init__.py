"""HTTP surface for the interview practice service."""
