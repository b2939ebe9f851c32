"""
auth: OAuth2 authorization core.

Provides:
  • Correlation store (state token → pending authorization, single use)
  • Token cache (user → credential, expiry-aware retention)
  • ``AuthorizationInitiator.begin``: build the provider URL for a user
  • ``CallbackResolver.complete``: redirect, code exchange, credential
  • ``CredentialProvider.resolve``: valid access token, refreshing once per expiry
"""
