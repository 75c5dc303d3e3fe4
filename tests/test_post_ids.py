import pytest

from blog_api.api.posts import parse_post_id


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12", 12),
        ("12abc", 12),
        ("1.5", 1),
        ("  7", 7),
        ("+3", 3),
        ("-4", -4),
        ("007", 7),
    ],
)
def test_leading_integer_is_used(raw, expected):
    assert parse_post_id(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "x1", "+", " - 1", "١٢", "2147483648", "99999999999999999999"])
def test_ids_without_a_usable_integer(raw):
    assert parse_post_id(raw) is None
