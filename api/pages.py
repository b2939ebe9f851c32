"""
HTML shown in the browser tab the provider redirects to.
"""

from __future__ import annotations

from html import escape


def callback_page(success: bool, title: str, message: str) -> str:
    """
    Small page that tells the user to go back to the chat.

    Closes itself on success, like a login popup would.
    """
    status_emoji = "✅" if success else "❌"
    color = "#00d992" if success else "#ef4444"
    auto_close = "setTimeout(() => window.close(), 2000);" if success else ""

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Tracker Assistant | {escape(title)}</title>
    <style>
        body {{
            font-family: system-ui, sans-serif;
            background: #0b0d11; color: #e4e7ee;
            display: flex; align-items: center; justify-content: center;
            height: 100vh; margin: 0;
        }}
        .card {{
            text-align: center; padding: 40px;
            background: #12151b; border: 1px solid #1f2330;
            border-radius: 12px; max-width: 400px;
        }}
        .emoji {{ font-size: 3rem; }}
        h2 {{ color: {color}; margin: 16px 0 8px; }}
        p {{ color: #a0a6b8; font-size: 0.85rem; }}
    </style>
</head>
<body>
    <div class="card">
        <div class="emoji">{status_emoji}</div>
        <h2>{escape(title)}</h2>
        <p>{escape(message)}</p>
    </div>
    <script>{auto_close}</script>
</body>
</html>"""
