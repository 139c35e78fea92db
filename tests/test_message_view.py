"""
Unit tests for mailhog_decoder/modules/message_view.py

MAINTENANCE WISDOM: Views are lazy. Most tests here check *when* work
happens (first access only, once per view), not just what comes out.
"""

import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from mailhog_decoder.modules.charset import UnsupportedCharsetError
from mailhog_decoder.modules.message_data import RawMessage
from mailhog_decoder.modules.message_view import MessageView
from mailhog_decoder.modules.transfer_encoding import TransferCodec
from tests.mail_fixtures import (
    MULTIPART_MESSAGE,
    NO_CHARSET_MESSAGE,
    UNKNOWN_CHARSET_MESSAGE,
    UTF8_MESSAGE,
    message,
)


def _view(template, codec=None):
    return MessageView.from_dict(message(template), codec)


class TestDecodedFields(unittest.TestCase):

    def test_multipart_message(self):
        view = _view(MULTIPART_MESSAGE)
        self.assertEqual(view.id, "multipart-1@mailhog.example")
        self.assertEqual(view.text, "ü\r\näö")
        self.assertEqual(view.html, "<strong>ü<br>äö</strong>")
        self.assertEqual(view.subject, "üäö")
        self.assertEqual(view.from_, "sender@example.org")
        self.assertEqual(view.to, "ueaeoe@example.org")

    def test_encoded_headers(self):
        view = _view(UTF8_MESSAGE)
        self.assertEqual(view.text, "日本\n")
        self.assertEqual(view.subject, "日本")
        self.assertEqual(view.from_, "日本 <from@example.org>")
        self.assertEqual(view.to, "日本 <nihon@example.org>")
        self.assertEqual(view.cc, "日本 <cc@example.org>")
        self.assertEqual(view.bcc, "日本 <bcc@example.org>")
        self.assertEqual(view.reply_to, "日本 <reply-to@example.org>")

    def test_missing_fields_are_none(self):
        view = _view(NO_CHARSET_MESSAGE)
        self.assertIsNone(view.html)
        self.assertIsNone(view.cc)
        self.assertIsNone(view.date)
        self.assertEqual(view.attachments, [])

    def test_date(self):
        self.assertEqual(
            _view(MULTIPART_MESSAGE).date,
            datetime(2016, 10, 23, 18, 59, 40, tzinfo=timezone.utc)
        )

    def test_delivery_date_comes_from_created(self):
        view = _view(MULTIPART_MESSAGE)
        self.assertEqual(
            view.delivery_date,
            datetime(2016, 10, 23, 18, 59, 41, 316236, tzinfo=timezone.utc)
        )
        self.assertNotEqual(view.delivery_date, view.date)

    def test_delivery_date_ignores_headers(self):
        data = message(NO_CHARSET_MESSAGE)
        data["Content"]["Headers"]["Delivery-Date"] = ["Mon, 1 Jan 2001 00:00:00 +0000"]
        self.assertEqual(
            MessageView.from_dict(data).delivery_date,
            datetime(2016, 10, 23, 18, 59, 43, tzinfo=timezone.utc)
        )

    def test_attachments(self):
        names = [attachment.name for attachment in _view(MULTIPART_MESSAGE).attachments]
        self.assertEqual(names, ["black-80x60.gif", "white-2x1.jpg"])


class TestMemoization(unittest.TestCase):

    def test_text_is_computed_once(self):
        view = _view(MULTIPART_MESSAGE)
        with patch.object(view._selector, "get_text", wraps=view._selector.get_text) as get_text:
            first = view.text
            second = view.text
        self.assertEqual(first, second)
        get_text.assert_called_once()

    def test_headers_are_computed_once(self):
        view = _view(UTF8_MESSAGE)
        with patch.object(view._headers, "get_header", wraps=view._headers.get_header) as get_header:
            for _ in range(3):
                self.assertEqual(view.subject, "日本")
        get_header.assert_called_once_with(view.raw.content, "Subject")

    def test_none_results_are_cached(self):
        view = _view(UTF8_MESSAGE)
        with patch.object(view._selector, "get_html", wraps=view._selector.get_html) as get_html:
            self.assertIsNone(view.html)
            self.assertIsNone(view.html)
        get_html.assert_called_once()

    def test_nothing_is_computed_before_access(self):
        with patch("mailhog_decoder.modules.message_view.extract_attachments") as extract:
            view = _view(MULTIPART_MESSAGE)
            extract.assert_not_called()
            view.attachments
            view.attachments
        extract.assert_called_once_with(view.raw)

    def test_attachments_list_is_the_same_object(self):
        view = _view(MULTIPART_MESSAGE)
        self.assertIs(view.attachments, view.attachments)

    def test_new_view_recomputes(self):
        raw = RawMessage.from_dict(message(MULTIPART_MESSAGE))
        first = MessageView(raw)
        second = MessageView(raw)
        first.text

        with patch.object(second._selector, "get_text", wraps=second._selector.get_text) as get_text:
            self.assertEqual(second.text, first.text)
        get_text.assert_called_once_with(raw)


class TestCharsetPolicy(unittest.TestCase):

    def test_default_view_falls_back_to_utf8(self):
        view = _view(UNKNOWN_CHARSET_MESSAGE)
        with self.assertLogs("mailhog_decoder.modules.charset", level="WARNING") as logs:
            self.assertEqual(view.text, "üäö")
        self.assertIn("x-made-up", logs.output[0])

    def test_strict_codec_raises(self):
        view = _view(UNKNOWN_CHARSET_MESSAGE, TransferCodec())
        with self.assertRaises(UnsupportedCharsetError):
            view.text

    def test_failed_field_is_not_cached(self):
        view = _view(UNKNOWN_CHARSET_MESSAGE, TransferCodec())
        for _ in range(2):
            with self.assertRaises(UnsupportedCharsetError):
                view.text


class TestToDict(unittest.TestCase):

    def test_multipart_message(self):
        result = _view(MULTIPART_MESSAGE).to_dict()

        self.assertEqual(result["ID"], "multipart-1@mailhog.example")
        self.assertEqual(result["text"], "ü\r\näö")
        self.assertEqual(result["subject"], "üäö")
        self.assertIsNone(result["cc"])
        self.assertIsNone(result["replyTo"])
        self.assertEqual(result["date"], "2016-10-23T20:59:40+02:00")
        self.assertEqual(result["deliveryDate"], "2016-10-23T18:59:41.316236+00:00")
        self.assertEqual(
            [attachment["name"] for attachment in result["attachments"]],
            ["black-80x60.gif", "white-2x1.jpg"]
        )

    def test_missing_dates(self):
        data = message(NO_CHARSET_MESSAGE)
        data["Created"] = ""
        result = MessageView.from_dict(data).to_dict()
        self.assertIsNone(result["date"])
        self.assertIsNone(result["deliveryDate"])


if __name__ == "__main__":
    unittest.main()
