"""Tests for translating the discovery filter model into TMDB options."""

import pytest

from cinelist.api.routes.catalog import build_discover_options, is_movie, is_tv_show
from cinelist.api.schemas import MediaFilter


class TestBuildDiscoverOptions:

    def test_defaults(self):
        assert build_discover_options(MediaFilter(), "popularity", "desc", True) == {
            "page": 1,
            "sort_by": "popularity.desc",
        }

    @pytest.mark.parametrize("option,is_movie_type,expected", [
        ("release-date", True, "primary_release_date.desc"),
        ("release-date", False, "first_air_date.desc"),
        ("title", True, "title.asc"),
        ("title", False, "name.asc"),
        ("date-added", True, "popularity.desc"),
    ])
    def test_sort_mapping(self, option: str, is_movie_type: bool, expected: str):
        assert build_discover_options(MediaFilter(), option, "", is_movie_type)["sort_by"] == expected

    def test_direction_flips_suffix(self):
        assert build_discover_options(MediaFilter(), "title", "desc", True)["sort_by"] == "title.desc"
        assert build_discover_options(MediaFilter(), "popularity", "asc", True)["sort_by"] == "popularity.asc"

    def test_single_year(self):
        filters = MediaFilter(yearRange={"min": 1999, "max": 1999})
        assert build_discover_options(filters, "popularity", "desc", True, 2026)["primary_release_year"] == 1999
        assert build_discover_options(filters, "popularity", "desc", False, 2026)["first_air_date_year"] == 1999

    def test_year_range(self):
        filters = MediaFilter(yearRange={"min": 1990, "max": 2000})
        options = build_discover_options(filters, "popularity", "desc", True, 2026)
        assert options["primary_release_date.gte"] == "1990-01-01"
        assert options["primary_release_date.lte"] == "2000-12-31"

    def test_slider_bounds_are_open(self):
        filters = MediaFilter(yearRange={"min": 1970, "max": 2026})
        options = build_discover_options(filters, "popularity", "desc", False, 2026)
        assert "first_air_date.gte" not in options
        assert "first_air_date.lte" not in options

    def test_open_upper_bound_uses_current_year(self):
        filters = MediaFilter(yearRange={"min": 2010})
        options = build_discover_options(filters, "popularity", "desc", True, 2026)
        assert options["primary_release_date.gte"] == "2010-01-01"
        assert options["primary_release_date.lte"] == "2026-12-31"

    def test_language_falls_back_to_first(self):
        filters = MediaFilter(languages=["xx", "yy"])
        assert build_discover_options(filters, "popularity", "desc", True)["with_original_language"] == "xx"


class TestMediaTypeGuards:

    def test_explicit_media_type(self):
        assert is_movie({"media_type": "movie", "name": "x"})
        assert is_tv_show({"media_type": "tv", "title": "x"})

    def test_inferred_from_fields(self):
        assert is_movie({"title": "Fight Club"})
        assert not is_movie({"name": "Game of Thrones"})
        assert is_tv_show({"name": "Game of Thrones"})
        assert not is_tv_show({"name": "x", "title": "y"})
