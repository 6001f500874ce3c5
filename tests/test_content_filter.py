# test_content_filter.py
# Unit tests for the contact-form spam and profanity filter

# @see: gateway/content_filter.py - Implementation under test

import pytest

from gateway.content_filter import ContentFilter, content_filter


@pytest.mark.parametrize(
    "text",
    [
        "Buy BITCOIN now",
        "click here for prizes",
        "Click   Here",
        "cheap pills available",
        "message me on Telegram",
        "what the shit",
    ],
)
def test_flags_spam_and_profanity(text):
    assert content_filter.is_profane(text)


@pytest.mark.parametrize(
    "text",
    [
        "Hello, I love your work!",
        "I took a class on assessment",
        "Scunthorpe is a town",
        "",
        None,
    ],
)
def test_allows_clean_text(text):
    assert not content_filter.is_profane(text)


def test_add_words():
    custom = ContentFilter(words=[])
    assert not custom.is_profane("blockchain")
    custom.add_words("blockchain")
    assert custom.is_profane("New Blockchain offer")


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("visit http://spam.example", True),
        ("HTTPS://SPAM.EXAMPLE", True),
        ("go to www.example.com", True),
        ("no links here", False),
        (None, False),
    ],
)
def test_contains_link(text, expected):
    assert ContentFilter.contains_link(text) is expected
