"""Inline HTML for the demo pages.

Every dynamic value passes through html.escape before it is formatted
into a page.  A template engine can replace this once the pages grow
beyond a handful of fields.
"""

from __future__ import annotations

import html

from pkce_frontend.models.user_info import UserInfo

_LAYOUT_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{title} · pkce-frontend</title>
  <style>
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
      font-family: system-ui, -apple-system, sans-serif;
      background: #f5f5f5; color: #111;
    }}
    nav {{
      display: flex; justify-content: space-between; align-items: center;
      padding: .75rem 1.5rem; background: #111; color: #fff;
    }}
    nav a {{ color: #fff; text-decoration: none; margin-right: 1rem; }}
    nav form {{ display: inline; }}
    main {{ display: flex; justify-content: center; padding: 3rem 1rem; }}
    .card {{
      background: #fff; padding: 2rem; border-radius: 8px;
      box-shadow: 0 2px 8px rgba(0,0,0,.1); width: 420px;
    }}
    h1 {{ font-size: 1.25rem; margin-bottom: 1.25rem; }}
    dt {{ font-size: .8rem; color: #666; margin-top: .75rem; }}
    dd {{ font-size: 1rem; }}
    ul {{ margin: .25rem 0 0 1.25rem; }}
    label {{ display: block; font-size: .85rem; margin: 1.25rem 0 .25rem; }}
    input[type=text] {{
      width: 100%; padding: .5rem; margin-bottom: 1rem;
      border: 1px solid #ccc; border-radius: 4px; font-size: .95rem;
    }}
    button {{
      padding: .6rem 1.2rem; background: #111; color: #fff;
      border: none; border-radius: 4px; font-size: .95rem; cursor: pointer;
    }}
    nav button {{ background: #fff; color: #111; padding: .3rem .8rem; }}
    .error {{ color: #c00; font-size: .85rem; margin-bottom: 1rem; }}
    .muted {{ color: #666; font-size: .85rem; }}
  </style>
</head>
<body>
  <nav>
    <div><a href="/">Home</a><a href="/profile">Profile</a></div>
    <div>{nav_user}</div>
  </nav>
  <main><div class="card">{body}</div></main>
</body>
</html>
"""

_LOGOUT_FORM = (
    '<form method="post" action="/logout"><button type="submit">Log out</button></form>'
)


def _display_name(user: UserInfo) -> str:
    return user.name or user.login or "unknown user"


def layout(title: str, body: str, user: UserInfo | None = None) -> str:
    if user is None:
        nav_user = ""
    else:
        nav_user = f"{html.escape(_display_name(user))} &nbsp; {_LOGOUT_FORM}"
    return _LAYOUT_HTML.format(title=html.escape(title), body=body, nav_user=nav_user)


def landing_page(user: UserInfo | None) -> str:
    if user is not None:
        body = (
            f"<h1>Welcome back, {html.escape(_display_name(user))}</h1>"
            '<p><a href="/profile">View your profile</a></p>'
        )
        return layout("Home", body, user)

    body = (
        "<h1>pkce-frontend</h1>"
        '<p class="muted">Sign in through the authorization server. '
        "This app never sees your password.</p><br>"
        '<form method="post" action="/login">'
        '<button type="submit">Log in</button>'
        "</form>"
    )
    return layout("Home", body)


def profile_page(user: UserInfo, error: str | None = None, notice: str | None = None) -> str:
    if user.authorized_clients:
        items = "".join(
            f"<li>{html.escape(c.name)} <span class=\"muted\">({html.escape(c.id)})</span></li>"
            for c in user.authorized_clients
        )
        clients = f"<ul>{items}</ul>"
    else:
        clients = '<span class="muted">none</span>'

    degraded = (
        '<p class="error">Profile could not be loaded from the resource server.</p>'
        if user.is_degraded
        else ""
    )
    error_block = f'<p class="error">{html.escape(error)}</p>' if error else ""
    notice_block = f'<p class="muted">{html.escape(notice)}</p>' if notice else ""

    body = (
        "<h1>Profile</h1>"
        f"{degraded}{error_block}{notice_block}"
        "<dl>"
        f"<dt>ID</dt><dd>{html.escape(user.id) or '&mdash;'}</dd>"
        f"<dt>Login</dt><dd>{html.escape(user.login) or '&mdash;'}</dd>"
        f"<dt>Name</dt><dd>{html.escape(user.name) or '&mdash;'}</dd>"
        f"<dt>Authorized clients</dt><dd>{clients}</dd>"
        "</dl>"
        '<form method="post" action="/profile">'
        '<label for="name">Change name</label>'
        f'<input id="name" name="name" type="text" required value="{html.escape(user.name, quote=True)}">'
        '<button type="submit">Save</button>'
        "</form>"
    )
    return layout("Profile", body, user)


def error_page(message: str, status_code: int) -> str:
    body = (
        f"<h1>Login failed ({status_code})</h1>"
        f'<p class="error">{html.escape(message)}</p>'
        '<p><a href="/">Back to start</a></p>'
    )
    return layout("Error", body)
