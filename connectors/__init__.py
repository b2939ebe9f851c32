"""
connectors: OAuth2 provider clients.

Provides a connector interface that handles:
  • Authorization-URL generation (with optional PKCE challenge)
  • Code → token exchange
  • Refresh grant
  • Fernet encryption of tokens written to the shared store

YouTrack (via JetBrains Hub) is the only provider wired in.
"""
