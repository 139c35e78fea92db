#!/usr/bin/env python3
"""
MailHog Decoder
Prints the decoded content of the latest captured message matching a query
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from mailhog_decoder.modules.mailhog_client import SEARCH_KINDS, MailHogAPIError, MailHogClient
from mailhog_decoder.modules.message_view import MessageView
from mailhog_decoder.utils.config import Config, ConfigurationError
from mailhog_decoder.utils.logging_utils import setup_logging

logger = logging.getLogger("mailhog_decoder")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mailhog-decode",
        description="Show the decoded latest MailHog message matching a query"
    )
    parser.add_argument("query", help="Address or text to search for")
    parser.add_argument(
        "kind", nargs="?", default="to", choices=SEARCH_KINDS,
        help="Search kind (default: to)"
    )
    parser.add_argument("--env", default=".env", help="Environment file (default: .env)")
    parser.add_argument("--json", action="store_true", help="Print the message as JSON")
    return parser


def format_message(message: MessageView) -> str:
    """Human readable summary of a decoded message"""
    lines = [
        f"ID:       {message.id}",
        f"Subject:  {message.subject or ''}",
        f"From:     {message.from_ or ''}",
        f"To:       {message.to or ''}",
    ]
    if message.cc:
        lines.append(f"Cc:       {message.cc}")
    if message.date:
        lines.append(f"Date:     {message.date.isoformat()}")
    if message.delivery_date:
        lines.append(f"Received: {message.delivery_date.isoformat()}")
    for attachment in message.attachments:
        lines.append(f"Attached: {attachment.name} ({attachment.mime_type})")
    lines.append("")
    lines.append(message.text if message.text is not None else (message.html or ""))
    return "\n".join(lines)


def main(args: Optional[List[str]] = None) -> int:
    options = build_parser().parse_args(args)

    try:
        config = Config(options.env)
        config.validate()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.system)
    client = MailHogClient(config.mailhog)

    latest = {
        "from": client.latest_from,
        "to": client.latest_to,
        "containing": client.latest_containing,
    }[options.kind]

    try:
        message = latest(options.query)
    except MailHogAPIError as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1

    if message is None:
        logger.info("No message found for %s query", options.kind)
        return 1

    if options.json:
        print(json.dumps(message.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(format_message(message))
    return 0


if __name__ == "__main__":
    sys.exit(main())
