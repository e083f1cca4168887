"""
Property-based Testing with Hypothesis.

Pure helpers: money formatting, brand colors, phone normalization and the
order transition table.
"""

import re
from urllib.parse import parse_qs, urlparse

from hypothesis import given, settings, strategies as st

from rest_api.services.domain.public_menu_service import build_whatsapp_url, format_cents
from shared.config.constants import ORDER_TRANSITIONS, OrderStatus, Roles, get_allowed_order_transitions
from shared.utils.colors import BLACK, WHITE, get_contrast_color, hex_to_rgb
from shared.utils.validators import normalize_whatsapp_number

hex_colors = st.builds(
    lambda r, g, b: f"#{r:02x}{g:02x}{b:02x}",
    st.integers(0, 255),
    st.integers(0, 255),
    st.integers(0, 255),
)

statuses = st.sampled_from(list(ORDER_TRANSITIONS))


class TestMoneyProperties:
    """Property-based tests for cents formatting."""

    @given(cents=st.integers(min_value=0, max_value=100_000_00))
    @settings(max_examples=100)
    def test_format_cents_round_trips(self, cents):
        """Property: formatted cents parse back to the same integer."""
        text = format_cents(cents)
        whole, fraction = text.split(".")
        assert len(fraction) == 2
        assert int(whole) * 100 + int(fraction) == cents


class TestColorProperties:
    """Property-based tests for brand colors."""

    @given(color=hex_colors)
    def test_contrast_is_black_or_white(self, color):
        """Property: the foreground is always black or white."""
        assert get_contrast_color(color) in (BLACK, WHITE)

    @given(color=hex_colors)
    def test_shorthand_expands(self, color):
        """Property: "#abc" means the same as "#aabbcc"."""
        short = "#" + color[1] + color[3] + color[5]
        doubled = "#" + "".join(ch * 2 for ch in short[1:])
        assert hex_to_rgb(short) == hex_to_rgb(doubled)

    @given(a=hex_colors, b=hex_colors)
    def test_contrast_is_monotonic(self, a, b):
        """Property: a color lighter on every channel never gets a lighter text color."""
        ra, ga, ba = hex_to_rgb(a)
        rb, gb, bb = hex_to_rgb(b)
        if ra >= rb and ga >= gb and ba >= bb and get_contrast_color(b) == BLACK:
            assert get_contrast_color(a) == BLACK


class TestWhatsAppProperties:
    """Property-based tests for WhatsApp numbers and links."""

    @given(value=st.text(max_size=40))
    def test_normalized_is_digits_or_none(self, value):
        """Property: normalization leaves only ASCII digits, or nothing."""
        digits = normalize_whatsapp_number(value)
        assert digits is None or re.fullmatch(r"[0-9]+", digits)

    @given(
        number=st.from_regex(r"\+?[0-9]{8,12}", fullmatch=True),
        message=st.text(st.characters(blacklist_categories=("Cs",)), min_size=1, max_size=200),
    )
    @settings(max_examples=50)
    def test_message_survives_encoding(self, number, message):
        """Property: the text parameter decodes to the original message."""
        url = build_whatsapp_url(number, message)
        parsed = urlparse(url)
        assert parsed.path == "/" + number.lstrip("+")
        assert parse_qs(parsed.query, keep_blank_values=True)["text"] == [message]


class TestOrderTransitionProperties:
    """Property-based tests for the order state machine."""

    @given(current=statuses, roles=st.lists(st.sampled_from([Roles.ROOT_ADMIN, Roles.RESTAURANT_ADMIN, Roles.KITCHEN])))
    def test_allowed_is_subset_of_table(self, current, roles):
        """Property: role rules never allow transitions outside the table."""
        assert set(get_allowed_order_transitions(current, roles)) <= set(ORDER_TRANSITIONS[current])

    @given(current=statuses)
    def test_nothing_returns_to_pending(self, current):
        """Property: no transition leads back to pending."""
        assert OrderStatus.PENDING not in ORDER_TRANSITIONS[current]
