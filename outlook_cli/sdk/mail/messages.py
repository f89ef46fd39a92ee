"""Helpers over Graph message resources.

Graph returns messages as JSON objects; the SDK passes them around as
plain dicts. These helpers pull display values out of them and build the
compact dicts the CLI prints.
"""

from typing import Dict, Any, List, Optional


def _format_address(recipient: Optional[dict]) -> Optional[str]:
    email = (recipient or {}).get("emailAddress") or {}
    address = email.get("address")
    if not address:
        return None
    name = email.get("name")
    if name:
        return f"{name} <{address}>"
    return address


def format_sender(msg: dict) -> Optional[str]:
    """Return 'Name <address>', the bare address if there is no name, or None."""
    return _format_address(msg.get("from"))


def format_recipients(msg: dict) -> Optional[str]:
    """Return the To addresses joined with ', ', or None if Graph sent none."""
    recipients = msg.get("toRecipients")
    if recipients is None:
        return None
    addresses = [
        (r.get("emailAddress") or {}).get("address")
        for r in recipients
    ]
    return ", ".join(a for a in addresses if a)


def get_body_text(msg: dict) -> Optional[str]:
    """Return the body content (text or HTML, as stored), or None."""
    return (msg.get("body") or {}).get("content")


def get_header(msg: dict, name: str) -> Optional[str]:
    """Get an internet message header value by name (case-insensitive)."""
    for header in msg.get("internetMessageHeaders") or []:
        if header.get("name", "").lower() == name.lower():
            return header.get("value")
    return None


def _unsubscribe_targets(value: str) -> List[str]:
    targets = []
    for part in value.split(","):
        part = part.strip()
        if part.startswith("<") and part.endswith(">"):
            targets.append(part[1:-1])
    return targets


def parse_unsubscribe_header(value: Optional[str]) -> Optional[str]:
    """
    Pick the target of a List-Unsubscribe header.

    The header is a comma-separated list of <URI> entries, e.g.
    ``<mailto:unsub@example.com>, <https://example.com/unsub>``. An http(s)
    URL is preferred; otherwise the first entry of any scheme is used.
    """
    if not value:
        return None
    targets = _unsubscribe_targets(value)
    for target in targets:
        if target.startswith("http://") or target.startswith("https://"):
            return target
    return targets[0] if targets else None


def get_unsubscribe_url(msg: dict) -> Optional[str]:
    """Return the unsubscribe target advertised by a message, if any."""
    return parse_unsubscribe_header(get_header(msg, "List-Unsubscribe"))


def summarize(msg: dict) -> Dict[str, Any]:
    """Build the list-view dict for a message."""
    return {
        "id": msg.get("id"),
        "from": format_sender(msg),
        "subject": msg.get("subject"),
        "date": msg.get("receivedDateTime"),
        "snippet": msg.get("bodyPreview"),
        "isRead": msg.get("isRead"),
        "categories": msg.get("categories"),
    }


def detail(msg: dict) -> Dict[str, Any]:
    """Build the read-view dict for a message."""
    return {
        "id": msg.get("id"),
        "from": format_sender(msg),
        "to": format_recipients(msg),
        "subject": msg.get("subject"),
        "date": msg.get("receivedDateTime"),
        "body": get_body_text(msg),
        "snippet": msg.get("bodyPreview"),
        "isRead": msg.get("isRead"),
        "categories": msg.get("categories"),
    }
