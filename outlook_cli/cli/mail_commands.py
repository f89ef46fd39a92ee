"""CLI commands for mailbox operations."""

import json
import logging
import webbrowser

import click
from click_option_group import optgroup, MutuallyExclusiveOptionGroup

from outlook_cli.sdk import mail as sdk_mail
from outlook_cli.sdk.mail.search import DEFAULT_MAX_RESULTS

from .decorators import json_output, report_errors, require_login

logger = logging.getLogger(__name__)


def _echo_json(data):
    click.echo(json.dumps(data))


@click.command("folders")
@json_output
@require_login
@report_errors
def folders_cmd(as_json):
    """List mail folders."""
    folders = sdk_mail.list_folders()
    if as_json:
        _echo_json(folders)
        return
    if not folders:
        click.echo("No folders found.")
        return
    for folder in folders:
        unread = folder.get("unreadItemCount", 0)
        total = folder.get("totalItemCount", 0)
        click.echo(f"{folder['displayName']} ({unread}/{total}) | {folder['id']}")


@click.command("labels")
@json_output
@require_login
@report_errors
def labels_cmd(as_json):
    """List categories (like Gmail labels)."""
    categories = sdk_mail.list_categories()
    if as_json:
        _echo_json(categories)
        return
    if not categories:
        click.echo("No categories found.")
        return
    click.echo("Categories:")
    for category in categories:
        color = category.get("color") or "none"
        click.echo(f"  {category['displayName']} (color: {color})")


@click.command("list")
@click.option('-n', '--max', 'max_results', type=click.IntRange(min=1), default=DEFAULT_MAX_RESULTS, show_default=True,
              help='Maximum number of messages to show.')
@click.option('-u', '--unread', is_flag=True, help='Show only unread messages.')
@optgroup.group('Message source', cls=MutuallyExclusiveOptionGroup)
@optgroup.option('-q', '--query', default=None, help='Search all folders instead of listing one.')
@optgroup.option('-l', '--label', 'folder', default=None,
                 help='Folder to list: inbox (default), sent, drafts, archive, trash, spam, or a folder ID.')
@json_output
@require_login
@report_errors
def list_cmd(max_results, unread, query, folder, as_json):
    """List messages."""
    if query:
        if unread:
            logger.warning("--unread is ignored when searching with --query")
        messages = sdk_mail.search_messages(query, max_results=max_results)
    else:
        messages = sdk_mail.list_messages(folder or "inbox", unread_only=unread,
                                          max_results=max_results)
    logger.info(f"Found {len(messages)} messages")

    if as_json:
        _echo_json(messages)
        return
    if not messages:
        click.echo("No messages found.")
        return
    for msg in messages:
        sender = msg.get("from") or "Unknown"
        subject = msg.get("subject") or "(no subject)"
        click.echo(f"{msg['id']} | {sender} | {subject}")


@click.command("read")
@click.argument('message_id')
@json_output
@require_login
@report_errors
def read_cmd(message_id, as_json):
    """Read a specific message."""
    msg = sdk_mail.read_message(message_id)
    if as_json:
        _echo_json(msg)
        return

    click.echo(f"From: {msg.get('from') or 'Unknown'}")
    click.echo(f"To: {msg.get('to') or 'Unknown'}")
    click.echo(f"Subject: {msg.get('subject') or '(no subject)'}")
    click.echo(f"Date: {msg.get('date') or 'Unknown'}")
    if msg.get("categories"):
        click.echo(f"Categories: {', '.join(msg['categories'])}")
    click.echo("---")
    body = msg.get("body") or msg.get("snippet")
    if body:
        click.echo(body)


@click.command("archive")
@click.argument('message_id')
@require_login
@report_errors
def archive_cmd(message_id):
    """Archive a message (move to Archive folder)."""
    sdk_mail.archive(message_id)
    click.echo(f"Archived {message_id}")


@click.command("spam")
@click.argument('message_id')
@require_login
@report_errors
def spam_cmd(message_id):
    """Mark a message as spam (move to Junk).

    If the message advertises a web unsubscribe link, it is opened first.
    """
    msg = sdk_mail.get_message(message_id)
    url = sdk_mail.get_unsubscribe_url(msg)
    if url and url.startswith("http"):
        click.echo(f"Opening unsubscribe link: {url}")
        try:
            if not webbrowser.open(url):
                logger.warning(f"Could not open a browser for {url}")
        except webbrowser.Error as e:
            logger.warning(f"Could not open unsubscribe link {url}: {e}")
    sdk_mail.mark_spam(message_id)
    click.echo(f"Marked as spam {message_id}")


@click.command("unspam")
@click.argument('message_id')
@require_login
@report_errors
def unspam_cmd(message_id):
    """Remove from spam and move to inbox."""
    sdk_mail.unspam(message_id)
    click.echo(f"Moved to inbox {message_id}")


@click.command("delete")
@click.argument('message_id')
@require_login
@report_errors
def delete_cmd(message_id):
    """Move a message to trash (Deleted Items)."""
    sdk_mail.trash(message_id)
    click.echo(f"Moved to trash {message_id}")


@click.command("label")
@click.argument('message_id')
@click.argument('category')
@require_login
@report_errors
def label_cmd(message_id, category):
    """Add a category to a message."""
    sdk_mail.add_category(message_id, category)
    click.echo(f"Added category {category} to {message_id}")


@click.command("unlabel")
@click.argument('message_id')
@click.argument('category')
@require_login
@report_errors
def unlabel_cmd(message_id, category):
    """Remove a category from a message."""
    sdk_mail.remove_category(message_id, category)
    click.echo(f"Removed category {category} from {message_id}")


@click.command("mark-read")
@click.argument('message_id')
@require_login
@report_errors
def mark_read_cmd(message_id):
    """Mark a message as read."""
    sdk_mail.mark_read(message_id)
    click.echo(f"Marked as read {message_id}")


@click.command("mark-unread")
@click.argument('message_id')
@require_login
@report_errors
def mark_unread_cmd(message_id):
    """Mark a message as unread."""
    sdk_mail.mark_unread(message_id)
    click.echo(f"Marked as unread {message_id}")


@click.command("unsubscribe")
@click.argument('message_id')
@require_login
@report_errors
def unsubscribe_cmd(message_id):
    """Unsubscribe from a mailing list (opens unsubscribe link)."""
    def open_link(url):
        click.echo(f"Opening unsubscribe link: {url}")
        return webbrowser.open(url)

    sdk_mail.unsubscribe(message_id, open_link=open_link)


MAIL_COMMANDS = [
    folders_cmd,
    labels_cmd,
    list_cmd,
    read_cmd,
    archive_cmd,
    spam_cmd,
    unspam_cmd,
    delete_cmd,
    label_cmd,
    unlabel_cmd,
    mark_read_cmd,
    mark_unread_cmd,
    unsubscribe_cmd,
]
