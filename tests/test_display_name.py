import pytest

from arranke_toolkit.database.data_models.profile import DisplayNamePreference
from arranke_toolkit.listings.display_name import DEFAULT_DISPLAY_NAME, get_display_name


@pytest.mark.parametrize(
    "full_name, username, preference, expected",
    [
        ("Ada Lovelace", "ada", DisplayNamePreference.FULL_NAME, "Ada Lovelace"),
        ("Ada Lovelace", "ada", DisplayNamePreference.USERNAME, "ada"),
        ("Ada Lovelace", "ada", DisplayNamePreference.DEFAULT, "Ada Lovelace"),
        (None, "ada", DisplayNamePreference.FULL_NAME, "ada"),
        ("Ada Lovelace", None, DisplayNamePreference.USERNAME, "Ada Lovelace"),
        (None, None, DisplayNamePreference.DEFAULT, DEFAULT_DISPLAY_NAME),
    ],
)
def test_get_display_name(full_name, username, preference, expected):
    assert get_display_name(full_name, username, preference) == expected
