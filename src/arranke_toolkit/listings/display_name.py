from arranke_toolkit.database.data_models.profile import DisplayNamePreference

DEFAULT_DISPLAY_NAME = "usuario"


def get_display_name(
    full_name: str | None,
    username: str | None,
    preference: DisplayNamePreference = DisplayNamePreference.DEFAULT,
) -> str:
    """Name shown for a listing owner.

    An explicit preference wins when the preferred name exists; otherwise the full
    name, then the username, then a generic placeholder.
    """
    if preference == DisplayNamePreference.FULL_NAME and full_name:
        return full_name
    if preference == DisplayNamePreference.USERNAME and username:
        return username
    return full_name or username or DEFAULT_DISPLAY_NAME
