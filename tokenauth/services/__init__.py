"""Application services: credentials, session refresh and revocation."""
