"""
Unit tests for mailhog_decoder/modules/header_decoder.py
"""

import unittest
from datetime import datetime, timedelta, timezone

from mailhog_decoder.modules.charset import CharsetTranscoder, UnsupportedCharsetError
from mailhog_decoder.modules.header_decoder import HeaderDecoder, decode_header_value
from mailhog_decoder.modules.message_data import Part, RawMessage
from mailhog_decoder.modules.transfer_encoding import TransferCodec
from tests.mail_fixtures import LATIN1_MESSAGE, MULTIPART_MESSAGE, UTF8_MESSAGE, message


class TestDecodeHeaderValue(unittest.TestCase):

    def test_base64_word_with_address(self):
        self.assertEqual(
            decode_header_value("=?UTF-8?B?5pel5pys?= <cc@example.org>"),
            "日本 <cc@example.org>"
        )

    def test_quoted_printable_word(self):
        self.assertEqual(decode_header_value("=?UTF-8?Q?=C3=BC=C3=A4=C3=B6?="), "üäö")

    def test_quoted_printable_word_iso_8859_1(self):
        self.assertEqual(decode_header_value("=?ISO-8859-1?Q?=FC=E4=F6?="), "üäö")

    def test_underscore_is_space_in_q_words(self):
        self.assertEqual(
            decode_header_value("=?UTF-8?Q?Gr=C3=BC=C3=9Fe_aus_K=C3=B6ln?="),
            "Grüße aus Köln"
        )

    def test_underscore_is_kept_in_b_words(self):
        # "a_b" in base64
        self.assertEqual(decode_header_value("=?UTF-8?B?YV9i?="), "a_b")

    def test_lowercase_encoding_letters(self):
        self.assertEqual(decode_header_value("=?utf-8?b?5pel5pys?="), "日本")
        self.assertEqual(decode_header_value("=?utf-8?q?=C3=BC?="), "ü")

    def test_each_word_is_decoded_independently(self):
        self.assertEqual(
            decode_header_value("=?UTF-8?B?5pel?= und =?ISO-8859-1?Q?=FC?= <x@example.org>"),
            "日 und ü <x@example.org>"
        )

    def test_text_between_words_is_kept(self):
        self.assertEqual(decode_header_value("=?UTF-8?B?5pel?= =?UTF-8?B?5pys?="), "日 本")

    def test_plain_values_are_unchanged(self):
        self.assertEqual(decode_header_value("Hello <hello@example.org>"), "Hello <hello@example.org>")

    def test_malformed_words_are_unchanged(self):
        for value in ("=?UTF-8?X?abc?=", "=?UTF-8?B?", "=??B?abc?=", "=?UTF-8?Q??="):
            with self.subTest(value=value):
                self.assertEqual(decode_header_value(value), value)

    def test_empty_values(self):
        self.assertEqual(decode_header_value(""), "")
        self.assertEqual(decode_header_value(None), "")

    def test_unknown_charset_is_strict_by_default(self):
        with self.assertRaises(UnsupportedCharsetError):
            decode_header_value("=?x-made-up?B?5pel?=")

    def test_lenient_codec_falls_back(self):
        decoder = HeaderDecoder(TransferCodec(CharsetTranscoder(fallback_charset="utf-8")))
        with self.assertLogs("mailhog_decoder.modules.charset", level="WARNING"):
            self.assertEqual(decoder.decode_header_value("=?x-made-up?B?5pel?="), "日")


class TestGetHeader(unittest.TestCase):

    def setUp(self):
        self.decoder = HeaderDecoder()
        self.content = RawMessage.from_dict(message(UTF8_MESSAGE)).content

    def test_decodes_first_value(self):
        self.assertEqual(self.decoder.get_header(self.content, "Subject"), "日本")
        self.assertEqual(self.decoder.get_header(self.content, "Cc"), "日本 <cc@example.org>")
        self.assertEqual(
            self.decoder.get_header(self.content, "Reply-To"), "日本 <reply-to@example.org>"
        )

    def test_only_first_value_is_used(self):
        part = Part(headers={"To": ["first@example.org", "second@example.org"]})
        self.assertEqual(self.decoder.get_header(part, "To"), "first@example.org")

    def test_missing_header_is_none(self):
        part = RawMessage.from_dict(message(LATIN1_MESSAGE)).content
        self.assertIsNone(self.decoder.get_header(part, "Cc"))

    def test_header_without_values_is_none(self):
        self.assertIsNone(self.decoder.get_header(Part(headers={"Cc": []}), "Cc"))

    def test_header_names_are_case_sensitive(self):
        self.assertIsNone(self.decoder.get_header(self.content, "subject"))


class TestGetDate(unittest.TestCase):

    def setUp(self):
        self.decoder = HeaderDecoder()

    def test_rfc_2822_date(self):
        content = RawMessage.from_dict(message(MULTIPART_MESSAGE)).content
        date = self.decoder.get_date(content)

        self.assertEqual(date, datetime(2016, 10, 23, 18, 59, 40, tzinfo=timezone.utc))
        self.assertEqual(date.utcoffset(), timedelta(hours=2))

    def test_iso_8601_fallback(self):
        part = Part(headers={"Date": ["2016-10-23T18:59:40Z"]})
        self.assertEqual(
            self.decoder.get_date(part),
            datetime(2016, 10, 23, 18, 59, 40, tzinfo=timezone.utc)
        )

    def test_unparseable_date_is_none(self):
        part = Part(headers={"Date": ["not a date"]})
        with self.assertLogs("mailhog_decoder.modules.header_decoder", level="DEBUG"):
            self.assertIsNone(self.decoder.get_date(part))

    def test_missing_date_is_none(self):
        self.assertIsNone(self.decoder.get_date(Part()))


if __name__ == "__main__":
    unittest.main()
