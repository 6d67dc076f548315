"""Tests for the WhatsApp chat parser."""

from datetime import datetime
from pathlib import Path

from whatsapp_intake.chatlog import ParsedMessage
from whatsapp_intake.chatlog.parser import parse_chat, parse_chat_file

FIXTURES = Path(__file__).parent / "fixtures"

SAMPLE = (
    "[15/02/2026, 10:30:15] John Smith: My printer isn't working\n"
    "Also it's making a grinding noise\n"
    "[15/02/2026, 10:32:00] Jane Doe: Outlook keeps crashing\n"
)


class TestEmptyInput:
    def test_empty_string(self):
        assert parse_chat("") == []

    def test_whitespace_only(self):
        assert parse_chat("   \n  ") == []

    def test_none(self):
        assert parse_chat(None) == []

    def test_noise_only(self):
        assert parse_chat("hello there\nno headers here") == []


class TestContinuation:
    def test_multiline_message_joined(self):
        messages = parse_chat(SAMPLE)
        assert len(messages) == 2
        assert messages[0].message_text == "My printer isn't working\nAlso it's making a grinding noise"
        assert messages[1].message_text == "Outlook keeps crashing"

    def test_blank_lines_inside_message_skipped(self):
        text = "[15/02/2026, 10:30:15] A: first\n\n   \nsecond"
        messages = parse_chat(text)
        assert messages[0].message_text == "first\nsecond"

    def test_continuation_lines_trimmed(self):
        text = "[15/02/2026, 10:30:15] A: first\n    indented line   "
        assert parse_chat(text)[0].message_text == "first\nindented line"

    def test_trailing_message_emitted(self):
        messages = parse_chat("[15/02/2026, 10:30:15] A: only one\nstill going")
        assert len(messages) == 1
        assert messages[0].message_text == "only one\nstill going"

    def test_crlf_line_endings(self):
        messages = parse_chat(SAMPLE.replace("\n", "\r\n"))
        assert len(messages) == 2
        assert messages[0].message_text.endswith("grinding noise")

    def test_unicode_line_separator_stays_in_body(self):
        messages = parse_chat("[15/02/2026, 10:30:15] A: first\u2028second\x0cthird\nnext line")
        assert len(messages) == 1
        assert messages[0].message_text == "first\u2028second\x0cthird\nnext line"


class TestHeaderFormats:
    def test_bracketed_and_dash_equivalent(self):
        bracketed = parse_chat("[15/02/2026, 10:30:15] A: hi")
        dashed = parse_chat("15/02/2026, 10:30:15 - A: hi")
        assert len(bracketed) == len(dashed) == 1
        for msg in (bracketed[0], dashed[0]):
            assert msg.sender_name == "A"
            assert msg.message_text == "hi"
            assert msg.received_at == "2026-02-15T10:30:15"

    def test_en_and_em_dash(self):
        for dash in ("–", "—"):
            messages = parse_chat(f"15/02/2026, 10:30 {dash} A: hi")
            assert len(messages) == 1
            assert messages[0].sender_name == "A"

    def test_comma_optional(self):
        messages = parse_chat("15.02.2026 10:30 - A: hi")
        assert len(messages) == 1
        assert messages[0].received_at == "2026-02-15T10:30:00"

    def test_message_text_may_contain_colons(self):
        messages = parse_chat("[15/02/2026, 10:30:15] Jane Doe: Error: code 5: retry later")
        assert messages[0].sender_name == "Jane Doe"
        assert messages[0].message_text == "Error: code 5: retry later"

    def test_sender_split_at_first_colon_space(self):
        messages = parse_chat("[15/02/2026, 10:30:15] Dr.Who:ever: see http://x.y: now")
        assert messages[0].sender_name == "Dr.Who:ever"
        assert messages[0].message_text == "see http://x.y: now"

    def test_sender_with_phone_number(self):
        messages = parse_chat("2/15/26, 10:30 AM - +27 82 555 0101: Server is offline")
        assert messages[0].sender_name == "+27 82 555 0101"
        assert messages[0].message_text == "Server is offline"

    def test_system_line_without_sender_is_continuation(self):
        text = "[15/02/2026, 10:30:15] A: hi\n15/02/2026, 10:31 - Bob joined using this group's invite link"
        messages = parse_chat(text)
        assert len(messages) == 1
        assert messages[0].message_text.endswith("Bob joined using this group's invite link")

    def test_header_without_body_is_not_a_header(self):
        messages = parse_chat("[15/02/2026, 10:30:15] A: hi\n[15/02/2026, 10:31:00] B:")
        assert len(messages) == 1

    def test_direction_marks_stripped(self):
        messages = parse_chat("\u200e[15/02/2026, 10:30:15] A: hi\u200f")
        assert len(messages) == 1
        assert messages[0].message_text == "hi"

    def test_many_colons_without_space(self):
        line = "[15/02/2026, 10:30:15] " + ":" * 50_000
        assert parse_chat(line) == []


class TestOrderingAndNoise:
    def test_order_preserved_regardless_of_time(self):
        text = (
            "[17/02/2026, 09:00:00] C: third day\n"
            "[15/02/2026, 09:00:00] A: first day\n"
            "[16/02/2026, 09:00:00] B: second day\n"
        )
        messages = parse_chat(text)
        assert [m.sender_name for m in messages] == ["C", "A", "B"]
        assert [m.message_text for m in messages] == ["third day", "first day", "second day"]

    def test_preamble_dropped(self):
        text = "Messages and calls are end-to-end encrypted.\n[15/02/2026, 10:30:15] A: hi"
        messages = parse_chat(text)
        assert len(messages) == 1
        assert "encrypted" not in messages[0].message_text

    def test_one_message_per_header(self):
        text = "\n".join(f"[15/02/2026, 10:{i:02d}:00] User {i}: msg {i}" for i in range(30))
        assert len(parse_chat(text)) == 30

    def test_selected_by_default(self):
        assert all(m.selected for m in parse_chat(SAMPLE))


class TestTimestamps:
    def test_am_pm(self):
        pm = parse_chat("15/02/2026, 2:15 PM - A: hi")[0]
        midnight = parse_chat("15/02/2026, 12:00 AM - A: hi")[0]
        noon = parse_chat("15/02/2026, 12:00 PM - A: hi")[0]
        assert pm.received_at == "2026-02-15T14:15:00"
        assert midnight.received_at == "2026-02-15T00:00:00"
        assert noon.received_at == "2026-02-15T12:00:00"

    def test_year_position(self):
        year_first = parse_chat("[2026/02/15, 10:30:15] A: hi")[0]
        year_last = parse_chat("[15/02/2026, 10:30:15] A: hi")[0]
        assert year_first.received_at.startswith("2026-02-15")
        assert year_last.received_at.startswith("2026-02-15")

    def test_malformed_headers_become_continuation(self):
        text = (
            "[15/02/2026, 10:30:15] A: good\n"
            "[2026/15/02/, 10:30:15] B: not a header\n"
            "99999/1/1, 10:00 - C: not a header either\n"
        )
        messages = parse_chat(text)
        assert len(messages) == 1
        assert messages[0].received_at == "2026-02-15T10:30:15"
        assert messages[0].message_text.count("\n") == 2

    def test_three_digit_year_falls_back_to_clock(self):
        messages = parse_chat("15/02/026, 10:30 - A: hi", now=lambda: datetime(2030, 1, 2, 3, 4, 5))
        assert messages[0].received_at == "2030-01-02T03:04:05"
        assert messages[0].message_text == "hi"


class TestDeterminism:
    def test_repeat_calls_equal(self):
        assert parse_chat(SAMPLE) == parse_chat(SAMPLE)

    def test_results_are_independent(self):
        first = parse_chat(SAMPLE)
        first[0].message_text = "changed"
        first[0].selected = False
        second = parse_chat(SAMPLE)
        assert second[0].message_text.startswith("My printer")
        assert second[0].selected is True


class TestParseFile:
    def test_fixture(self):
        messages = parse_chat_file(FIXTURES / "whatsapp-chat.txt")
        assert [m.sender_name for m in messages] == [
            "Acme Support",
            "John Smith",
            "Jane Doe",
            "Acme Support",
            "Priya Patel",
        ]
        assert messages[1].message_text == (
            "My printer isn't working\nAlso it's making a grinding noise\nIt's the HP in reception"
        )
        assert messages[4].received_at == "2026-02-16T08:01:09"
        assert messages[4].message_text.endswith("Address: Unit 4, 12 Dock Road")

    def test_to_dict(self):
        msg = ParsedMessage(sender_name="A", message_text="hi", received_at="2026-02-15T10:30:15")
        assert msg.to_dict() == {
            "sender_name": "A",
            "message_text": "hi",
            "received_at": "2026-02-15T10:30:15",
            "selected": True,
        }
