"""HTML pages for the status surface."""

from __future__ import annotations

from collections.abc import Sequence
from html import escape

from zonekeeper.domains.storage import DomainRecord

_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>{title}</title>
</head>
<body>
    <h1>{title}</h1>
{body}
</body>
</html>
"""


def _page(title: str, body: str) -> str:
    return _PAGE.format(title=escape(title), body=body)


def render_status_page(active: Sequence[DomainRecord], pending: Sequence[str]) -> str:
    """Render the active and pending collections."""
    active_items = "\n".join(
        f"        <li>{escape(record.name)} - Nameservers Correct: "
        f"{str(record.nameservers_correct).lower()} - Last Checked: "
        f"{record.last_checked.isoformat(timespec='seconds')}</li>"
        for record in active
    )
    pending_items = "\n".join(f"        <li>{escape(name)}</li>" for name in pending)

    body = f"""    <h2>Active Domains:</h2>
    <ul>
{active_items}
    </ul>
    <h2>Pending Domains:</h2>
    <ul>
{pending_items}
    </ul>
    <p><a href="/domains.json">View JSON</a></p>
    <p><a href="/submit">Submit Domain</a></p>"""
    return _page("Domain Manager", body)


def render_submit_page(nameservers: Sequence[str]) -> str:
    """Render the submission form with the nameservers domains must delegate to."""
    ns_items = "\n".join(f"        <li>{escape(ns.rstrip('.'))}</li>" for ns in nameservers)

    body = f"""    <p>Please ensure your domain's nameservers are set to:</p>
    <ol>
{ns_items}
    </ol>
    <form method="POST">
        <input type="text" name="domain" placeholder="Enter your domain" required>
        <input type="submit" value="Submit">
    </form>
    <p><a href="/">Back to Home</a></p>"""
    return _page("Submit Domain", body)
