"""
Behaviour every ReviewQueryEngine backend must share.
Each test runs against the in-memory and the SQLite-backed engine.
"""

from datetime import date, datetime, time

import pytest

from reviewapp.schemas.filters import FilterSpec
from reviewapp.schemas.review import Review

ALL_IDS = list(range(1, 11))
RATED_IDS = [1, 2, 3, 4, 6, 7, 8, 9]
DATED_IDS = [1, 2, 3, 4, 5, 7, 8, 10]


def ids(reviews):
    return [review.id for review in reviews]


def filtered_ids(engine, page_size=100, **criteria):
    return ids(engine.get_filtered_page(FilterSpec(**criteria), 1, page_size))


# --- pagination ---------------------------------------------------------------

def test_get_page_orders_by_id(loaded_engine):
    assert ids(loaded_engine.get_page(1, 3)) == [1, 2, 3]
    assert ids(loaded_engine.get_page(2, 3)) == [4, 5, 6]
    assert ids(loaded_engine.get_page(4, 3)) == [10]


def test_get_page_beyond_last_page_is_empty(loaded_engine):
    assert loaded_engine.get_page(5, 3) == []


@pytest.mark.parametrize("page", [2**62, 2**63, 10**30])
def test_page_past_integer_range_is_empty(loaded_engine, page):
    assert loaded_engine.get_page(page, 10) == []
    assert loaded_engine.get_filtered_page(None, page, 10) == []
    assert loaded_engine.get_filtered_page(FilterSpec(sort_by_rating=True), page, 10) == []


def test_huge_page_size_returns_everything(loaded_engine):
    assert ids(loaded_engine.get_page(1, 2**64)) == ALL_IDS
    assert ids(loaded_engine.get_filtered_page(None, 1, 2**64)) == ALL_IDS


@pytest.mark.parametrize("page", [0, -1, -50])
def test_non_positive_page_is_first_page(loaded_engine, page):
    assert ids(loaded_engine.get_page(page, 4)) == [1, 2, 3, 4]
    assert ids(loaded_engine.get_filtered_page(None, page, 4)) == [1, 2, 3, 4]


@pytest.mark.parametrize("page_size", [0, -1])
def test_non_positive_page_size_is_empty(loaded_engine, page_size):
    assert loaded_engine.get_page(1, page_size) == []
    assert loaded_engine.get_filtered_page(FilterSpec(), 1, page_size) == []


def test_page_three_of_two_record_store_is_empty(engine, sample_reviews):
    engine.save(sample_reviews[:2])
    assert engine.get_page(3, 1) == []


def test_pages_concatenate_to_full_sorted_result(loaded_engine):
    spec = FilterSpec(sort_by_rating=True)
    full = ids(loaded_engine.get_filtered_page(spec, 1, 100))

    collected = []
    page = 1
    while True:
        chunk = ids(loaded_engine.get_filtered_page(spec, page, 3))
        if not chunk:
            break
        collected.extend(chunk)
        page += 1

    assert collected == full
    assert len(set(collected)) == loaded_engine.get_filtered_count(spec) == 10


# --- rating and date bounds ---------------------------------------------------

def test_no_filters_matches_everything(loaded_engine):
    assert filtered_ids(loaded_engine) == ALL_IDS
    assert ids(loaded_engine.get_filtered_page(None, 1, 100)) == ALL_IDS
    assert loaded_engine.get_filtered_count(None) == 10
    assert loaded_engine.get_filtered_count(FilterSpec()) == 10


def test_rating_criteria(loaded_engine):
    assert filtered_ids(loaded_engine, rating=5) == [1, 3]
    assert filtered_ids(loaded_engine, min_rating=4) == [1, 3, 4, 7]
    assert filtered_ids(loaded_engine, max_rating=2) == [6, 8]
    assert filtered_ids(loaded_engine, min_rating=3, max_rating=4) == [2, 4, 7, 9]


@pytest.mark.parametrize("bound", [1, 2, 3, 4, 5])
def test_absent_rating_never_satisfies_a_bound(loaded_engine, bound):
    for criteria in ({"rating": bound}, {"min_rating": bound}, {"max_rating": bound}):
        matched = filtered_ids(loaded_engine, **criteria)
        assert 5 not in matched
        assert 10 not in matched


def test_widest_rating_range_matches_only_rated_reviews(loaded_engine):
    assert filtered_ids(loaded_engine, min_rating=1, max_rating=5) == RATED_IDS


def test_date_criteria_compare_calendar_days(loaded_engine):
    assert filtered_ids(loaded_engine, review_date=date(2024, 2, 1)) == [3, 4, 8]
    assert filtered_ids(loaded_engine, start_date=date(2024, 2, 1)) == [3, 4, 5, 8, 10]
    assert filtered_ids(loaded_engine, end_date=date(2024, 1, 20)) == [1, 2, 7]
    assert filtered_ids(
        loaded_engine, start_date=date(2024, 1, 20), end_date=date(2024, 1, 20)
    ) == [2, 7]


def test_absent_date_never_satisfies_a_date_criterion(loaded_engine):
    assert filtered_ids(
        loaded_engine, start_date=date(1900, 1, 1), end_date=date(2999, 12, 31)
    ) == DATED_IDS
    assert filtered_ids(loaded_engine, end_date=date(2999, 12, 31)) == DATED_IDS


def test_time_bounds_only_match_reviews_with_a_time_of_day(loaded_engine):
    assert filtered_ids(loaded_engine, start_time=time(9, 0)) == [3, 4, 7]
    assert filtered_ids(loaded_engine, end_time=time(9, 30)) == [3, 10]
    assert filtered_ids(loaded_engine, start_time=time(0, 0), end_time=time(23, 59, 59)) == [3, 4, 7, 10]


# --- text criteria ------------------------------------------------------------

def test_text_criteria_are_case_insensitive_substrings(loaded_engine):
    assert filtered_ids(loaded_engine, author_name="john") == [1, 3]
    assert filtered_ids(loaded_engine, author_name="JANE") == [2]
    assert filtered_ids(loaded_engine, review_title="superb") == [1, 7]
    assert filtered_ids(loaded_engine, product_name="iphone 13") == [1, 3, 8]
    assert filtered_ids(loaded_engine, store_name="amazon") == [1, 3, 6, 8]


def test_non_ascii_text_folds_case(loaded_engine):
    assert filtered_ids(loaded_engine, review_title="écran") == [7]
    assert filtered_ids(loaded_engine, author_name="ZOË") == [7]


def test_empty_text_criterion_matches_absent_fields(loaded_engine):
    assert filtered_ids(loaded_engine, author_name="") == ALL_IDS
    assert filtered_ids(loaded_engine, review_title="", store_name="") == ALL_IDS


def test_non_empty_text_criterion_never_matches_absent_field(loaded_engine):
    matched = filtered_ids(loaded_engine, author_name="o")
    assert matched == [1, 2, 3, 6, 7]
    assert 4 not in matched


def test_like_wildcards_are_literal(loaded_engine):
    assert filtered_ids(loaded_engine, review_title="100%") == [8]
    assert filtered_ids(loaded_engine, review_title="%") == [8]
    assert filtered_ids(loaded_engine, review_title="_") == []


def test_all_criteria_must_hold(loaded_engine):
    assert filtered_ids(loaded_engine, min_rating=4, store_name="amazon") == [1, 3]
    assert loaded_engine.get_filtered_count(FilterSpec(min_rating=4, store_name="amazon")) == 2


# --- sorting ------------------------------------------------------------------

def test_sort_by_rating_descending_nulls_last(loaded_engine):
    assert filtered_ids(loaded_engine, sort_by_rating=True) == [1, 3, 4, 7, 2, 9, 6, 8, 5, 10]


def test_sort_by_date_descending_nulls_last(loaded_engine):
    assert filtered_ids(loaded_engine, sort_by_date=True) == [10, 5, 4, 3, 8, 7, 2, 1, 6, 9]


def test_sort_by_rating_then_date(loaded_engine):
    assert filtered_ids(loaded_engine, sort_by_rating=True, sort_by_date=True) == [
        3, 1, 4, 7, 2, 9, 6, 8, 10, 5,
    ]


def test_sorting_happens_before_pagination(loaded_engine):
    spec = FilterSpec(sort_by_rating=True)
    assert ids(loaded_engine.get_filtered_page(spec, 1, 3)) == [1, 3, 4]
    assert ids(loaded_engine.get_filtered_page(spec, 2, 3)) == [7, 2, 9]
    assert ids(loaded_engine.get_filtered_page(spec, 4, 3)) == [10]
    assert loaded_engine.get_filtered_page(spec, 5, 3) == []


# --- keyword search -----------------------------------------------------------

def test_keyword_search_matches_any_keyword(loaded_engine):
    assert ids(loaded_engine.get_by_keywords(["fantastic", "mediocre"])) == [1, 2]
    assert loaded_engine.get_by_keywords(["zzz"]) == []


@pytest.mark.parametrize("keywords", [None, [], [None], [""], [None, ""]])
def test_keyword_search_without_usable_keywords_is_empty(loaded_engine, keywords):
    assert loaded_engine.get_by_keywords(keywords) == []


def test_keyword_search_drops_none_entries(loaded_engine):
    assert ids(loaded_engine.get_by_keywords([None, "SUPERB"])) == [1, 7]


def test_keyword_search_spans_title_and_text(loaded_engine):
    assert ids(loaded_engine.get_by_keywords(["superb fantastic"])) == [1]
    assert ids(loaded_engine.get_by_keywords(["%"])) == [8]


# --- lookup and dump ----------------------------------------------------------

def test_get_by_id(loaded_engine, sample_reviews):
    assert loaded_engine.get_by_id(3) == sample_reviews[2]
    assert loaded_engine.get_by_id(5) == sample_reviews[4]


@pytest.mark.parametrize("review_id", [None, 0, -1, 999])
def test_get_by_id_absent(loaded_engine, review_id):
    assert loaded_engine.get_by_id(review_id) is None


def test_get_all(loaded_engine):
    assert sorted(ids(loaded_engine.get_all())) == ALL_IDS
    assert loaded_engine.total_count() == 10


# --- save ---------------------------------------------------------------------

@pytest.mark.parametrize("batch", [None, []])
def test_save_empty_input_is_noop(engine, batch):
    engine.save(batch)
    assert engine.total_count() == 0


def test_save_skips_records_without_usable_id(engine):
    engine.save([Review(id=None, rating=3), Review(id=0, rating=3), Review(id=-4), Review(id=7, rating=2)])
    assert ids(engine.get_all()) == [7]


def test_save_rejects_none_in_batch_before_writing(engine, sample_reviews):
    with pytest.raises(TypeError):
        engine.save([sample_reviews[0], None, sample_reviews[1]])
    assert engine.total_count() == 0


def test_save_replaces_whole_record(loaded_engine):
    loaded_engine.save([Review(id=1, rating=1)])
    replaced = loaded_engine.get_by_id(1)
    assert replaced.model_dump() == Review(id=1, rating=1).model_dump()
    assert replaced.author_name is None
    assert loaded_engine.total_count() == 10


def test_save_is_idempotent(engine, sample_reviews):
    engine.save(sample_reviews)
    once = engine.get_all()
    engine.save(sample_reviews)
    assert engine.get_all() == once
    assert engine.total_count() == len(sample_reviews)


def test_last_record_for_an_id_wins_within_a_batch(engine):
    engine.save([Review(id=1, rating=2), Review(id=1, rating=4)])
    assert engine.get_by_id(1).rating == 4


def test_datetime_is_stored_in_whole_seconds(engine):
    engine.save([Review(id=1, reviewed_date=datetime(2024, 5, 1, 12, 0, 0, 987654))])
    assert engine.get_by_id(1).reviewed_date == datetime(2024, 5, 1, 12, 0, 0)


# --- aggregates ---------------------------------------------------------------

def test_aggregates_for_small_dataset(engine):
    engine.save([
        Review(id=1, rating=5, reviewed_date=date(2024, 1, 1)),
        Review(id=2, rating=3, reviewed_date=date(2024, 1, 20)),
        Review(id=3, rating=5, reviewed_date=date(2024, 2, 1)),
    ])
    assert engine.average_rating() == 13 / 3
    assert engine.rating_distribution() == {5: 2, 3: 1}
    assert engine.monthly_average() == {"2024-01": 4.0, "2024-02": 5.0}


def test_aggregates_for_empty_store(engine):
    assert engine.average_rating() == 0.0
    assert engine.rating_distribution() == {}
    assert engine.monthly_average() == {}
    assert engine.total_count() == 0


def test_aggregates_skip_missing_ratings(loaded_engine):
    assert loaded_engine.average_rating() == 27 / 8
    assert loaded_engine.rating_distribution() == {1: 1, 2: 1, 3: 2, 4: 2, 5: 2}
    assert loaded_engine.monthly_average() == {
        "2024-01": 4.0,
        "2024-02": 10 / 3,
        "unknown": 2.5,
    }


def test_aggregates_with_no_ratings_at_all(engine):
    engine.save([Review(id=1, reviewed_date=date(2024, 1, 1)), Review(id=2)])
    assert engine.average_rating() == 0.0
    assert engine.rating_distribution() == {}
    assert engine.monthly_average() == {}
