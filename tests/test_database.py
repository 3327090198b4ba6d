"""Unit tests for database URL handling."""

from cams.database import get_engine_url_and_connect_args


def test_plain_url_untouched():
    """URLs without SSL parameters pass straight through."""
    url = "postgresql+asyncpg://cams:pw@db:5432/cams"
    assert get_engine_url_and_connect_args(url) == (url, {})


def test_sslmode_moves_to_connect_args():
    """sslmode leaves the URL and becomes asyncpg's ssl argument; other params stay."""
    url, connect_args = get_engine_url_and_connect_args(
        "postgresql+asyncpg://cams:pw@db:5432/cams?sslmode=require&application_name=cams"
    )
    assert url == "postgresql+asyncpg://cams:pw@db:5432/cams?application_name=cams"
    assert connect_args == {"ssl": "require"}


def test_ssl_true_means_require():
    url, connect_args = get_engine_url_and_connect_args("postgresql+asyncpg://db/cams?ssl=true")
    assert url == "postgresql+asyncpg://db/cams"
    assert connect_args == {"ssl": "require"}


def test_unknown_ssl_value_dropped():
    """Values asyncpg does not know are stripped without enabling SSL."""
    url, connect_args = get_engine_url_and_connect_args("postgresql+asyncpg://db/cams?sslmode=bogus")
    assert url == "postgresql+asyncpg://db/cams"
    assert connect_args == {}
