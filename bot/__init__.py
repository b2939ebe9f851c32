"""
bot: chat-side seam of the authorization flow.

The chat transport itself lives outside this repository; it implements
``ChatNotifier`` to hear back when a user finishes (or abandons) an
authorization started from the chat.
"""
