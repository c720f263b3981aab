from pagewalker.core.models import PageLocation  # type: ignore[import]

from tests.helpers.pagewalker_imports import build_listing_url, parse_page_number


def test_parse_page_number_reads_query_string():
    assert parse_page_number("https://site/es/results/search?gender=F&pageno=4") == 4


def test_parse_page_number_reads_path_style_token():
    assert parse_page_number("https://site/es/results/city=X&pageno=2") == 2


def test_parse_page_number_defaults_to_first_page():
    assert parse_page_number("https://site/es/results/city=X") == 1
    assert parse_page_number("https://site/es/results/search?pageno=") == 1
    assert parse_page_number("https://site/es/results/search?pageno=0") == 1


def test_parse_page_number_ignores_similar_parameters():
    assert parse_page_number("https://site/es/results/search?xpageno=9") == 1


def test_parse_page_number_honours_custom_parameter():
    assert parse_page_number("https://site/list?page=3", page_param="page") == 3


def test_build_listing_url_first_page_is_bare_token():
    location = PageLocation(base_path="/es/results/", query_token="city=X", page=1)

    assert build_listing_url("https://site", location) == "https://site/es/results/city=X"


def test_build_listing_url_appends_page_to_path_token():
    location = PageLocation(base_path="/es/results/", query_token="city=X", page=2)

    assert build_listing_url("https://site/", location) == "https://site/es/results/city=X&pageno=2"


def test_build_listing_url_appends_page_to_query_token():
    location = PageLocation(base_path="/es/results/", query_token="search?gender=F", page=5)

    assert build_listing_url("https://site", location) == "https://site/es/results/search?gender=F&pageno=5"


def test_build_listing_url_starts_query_for_plain_token():
    location = PageLocation(base_path="/es/results/", query_token="search", page=3)

    assert build_listing_url("https://site", location) == "https://site/es/results/search?pageno=3"


def test_built_urls_parse_back_to_their_page():
    for token in ("city=X", "search?gender=F", "search"):
        location = PageLocation(base_path="/es/results/", query_token=token, page=7)
        assert parse_page_number(build_listing_url("https://site", location)) == 7
