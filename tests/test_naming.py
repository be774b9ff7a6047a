from datetime import datetime, timedelta

import pytest

from typesense_indexer.revisions.naming import (
    REVISION_ID_LENGTH,
    extract_revision_id,
    format_collection_name,
    generate_revision_id,
)


def test_generate_revision_id_format():
    rev = generate_revision_id(datetime(2021, 1, 2, 3, 4, 59))
    assert rev == "2021-01-02-03-04"
    assert len(rev) == REVISION_ID_LENGTH


def test_generate_revision_id_defaults_to_now():
    assert len(generate_revision_id()) == REVISION_ID_LENGTH


def test_revision_ids_sort_chronologically():
    start = datetime(2024, 9, 30, 23, 55)
    instants = [start + timedelta(minutes=7 * i) for i in range(20)]
    revs = [generate_revision_id(t) for t in instants]
    assert sorted(revs) == revs


@pytest.mark.parametrize("index_id", ["www", "www-bks-at-de", "digital-bks-at-de"])
def test_extract_round_trip(index_id):
    rev = generate_revision_id(datetime(2025, 12, 31, 23, 59))
    name = format_collection_name(index_id, rev)
    assert name == f"{index_id}-{rev}"
    assert extract_revision_id(name, index_id) == rev


@pytest.mark.parametrize(
    "name",
    [
        "www2024-01-01-12-00",        # missing separator
        "other-2024-01-01-12-00",     # other index
        "www-2024-01-01-12",          # too short
        "www-2024-01-01-12-00-00",    # too long
        "www-en-2024-01-01-12-00",    # index sharing the prefix
        "www-",
        "",
    ],
)
def test_extract_rejects_foreign_names(name):
    assert extract_revision_id(name, "www") is None
