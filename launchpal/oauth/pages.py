from html import escape

_STYLE = """
body { font-family: system-ui; max-width: 400px; margin: 50px auto; padding: 20px; }
.form-group { margin-bottom: 15px; }
input { width: 100%; padding: 8px; margin-top: 5px; }
input[type=checkbox] { width: auto; }
button { background: #4F46E5; color: white; padding: 10px 20px; border: none; border-radius: 5px; cursor: pointer; }
button:hover { background: #4338CA; }
.error { color: #B91C1C; }
"""

_HIDDEN = ("client_id", "redirect_uri", "state", "scope", "code_challenge", "code_challenge_method")


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><head>"
        f"<title>{escape(title)}</title><style>{_STYLE}</style>"
        f"</head><body>{body}</body></html>"
    )


def consent_page(client_name: str, params: dict, error: str | None = None) -> str:
    hidden = "".join(
        f'<input type="hidden" name="{name}" value="{escape(params.get(name) or "")}">'
        for name in _HIDDEN
    )
    scope = escape(params.get("scope") or "")
    err = f'<p class="error">{escape(error)}</p>' if error else ""
    body = f"""
<h2>Authorize LaunchPal</h2>
<p>The application <strong>{escape(client_name)}</strong> is requesting access to your LaunchPal account.</p>
<p>Requested scope: <code>{scope}</code></p>
{err}
<form method="POST" action="/oauth/authorize">
  {hidden}
  <div class="form-group"><label>Email</label><input type="email" name="email" required></div>
  <div class="form-group"><label>Password</label><input type="password" name="password" required></div>
  <div class="form-group">
    <label><input type="checkbox" name="consent" value="yes" required> Allow access to your LaunchPal account</label>
  </div>
  <button type="submit">Authorize</button>
</form>
"""
    return _page("LaunchPal Authorization", body)


def error_page(message: str) -> str:
    return _page(
        "LaunchPal Authorization Error",
        f'<h2>Authorization failed</h2><p class="error">{escape(message)}</p>',
    )
