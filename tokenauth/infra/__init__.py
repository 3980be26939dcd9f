"""Concrete adapters: password hashing, JWT codec and HTTP cookie transport."""
