"""
Callback Pages - HTML shown in the admin's browser after the OAuth redirect.

Google sends the admin's browser to /callback, so the result is a small
stand-alone page rather than JSON. Pure HTML/CSS, no JavaScript.

Usage:
======
    renderer = CallbackPageRenderer()
    html = renderer.render_success(outcome)
    html = renderer.render_error("No authorization code received.", title="Authorization Failed")
"""

import html as html_escape
from typing import Optional

from homeboard.services.authorization import CallbackOutcome


class CallbackPageRenderer:
    """
    Renders the success and error pages of the authorization callback.

    Attributes:
        theme: Color theme ("dark" or "light")
        font_size: Base font size in pixels
    """

    def __init__(self, theme: str = "dark", font_size: int = 18):
        self.theme = theme
        self.font_size = font_size

    def _get_css(self) -> str:
        """Generate CSS styles based on theme."""
        if self.theme == "dark":
            bg_color = "#1a1a2e"
            text_color = "#eaeaea"
            accent_color = "#4a90d9"
            muted_color = "#8a8a9a"
        else:
            bg_color = "#f5f5f5"
            text_color = "#1a1a1a"
            accent_color = "#1976d2"
            muted_color = "#666666"

        return f"""
        * {{
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }}

        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto,
                         Oxygen, Ubuntu, Cantarell, sans-serif;
            font-size: {self.font_size}px;
            line-height: 1.5;
            background-color: {bg_color};
            color: {text_color};
            display: flex;
            align-items: center;
            justify-content: center;
            min-height: 100vh;
        }}

        .container {{
            text-align: center;
            padding: 4rem 2rem;
            max-width: 640px;
        }}

        h1 {{
            font-size: 2rem;
            font-weight: 600;
            color: {accent_color};
            margin-bottom: 1rem;
        }}

        .hint {{
            color: {muted_color};
            font-size: 0.9rem;
            margin-top: 1rem;
        }}
        """

    def _page(self, title: str, body: str, extra_css: str = "") -> str:
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html_escape.escape(title)}</title>
    <style>
    {self._get_css()}
    {extra_css}
    </style>
</head>
<body>
    <div class="container">
{body}
    </div>
</body>
</html>
"""

    def render_success(self, outcome: CallbackOutcome) -> str:
        """
        Render the page shown after the credential was stored.

        Args:
            outcome: Result of AuthorizationFlowController.handle_callback
        """
        expires = outcome.expires_at.strftime("%Y-%m-%d %H:%M %Z")
        body = f"""        <div class="icon">✅</div>
        <h1>Calendar Connected</h1>
        <p>{html_escape.escape(outcome.message)}</p>
        <p class="hint">Access token valid until {html_escape.escape(expires)}. It is refreshed automatically.</p>
        <p class="hint">You can close this window.</p>"""
        return self._page("Calendar Connected", body, ".icon { font-size: 4rem; margin-bottom: 1rem; }")

    def render_error(
        self,
        error_message: str,
        title: str = "Authorization Failed",
        hint: Optional[str] = None,
    ) -> str:
        """
        Render an error page.

        Args:
            error_message: Error description to display (escaped)
            title: Page heading
            hint: Optional next step shown under the message

        Returns:
            Complete HTML error page as a string
        """
        hint_html = f'\n        <p class="hint">{html_escape.escape(hint)}</p>' if hint else ""
        body = f"""        <div class="error-icon">⚠️</div>
        <h1>{html_escape.escape(title)}</h1>
        <p class="error-message">{html_escape.escape(error_message)}</p>{hint_html}"""
        extra_css = """
    .error-icon {
        font-size: 4rem;
        margin-bottom: 1rem;
    }
    .error-message {
        color: #ef5350;
        font-size: 1.2rem;
        margin-bottom: 1rem;
    }
    """
        return self._page(title, body, extra_css)
