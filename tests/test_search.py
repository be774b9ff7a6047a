import pytest
from pydantic import BaseModel

from typesense_indexer.core.errors import ConfigurationError
from typesense_indexer.typesense.search import (
    SearchService,
    build_search_params,
    format_filter_query,
)


class Article(BaseModel):
    id: str
    title: str


def test_format_filter_query():
    assert format_filter_query(None) == ""
    assert format_filter_query({"lang": ["de"]}) == 'lang:="de"'
    assert format_filter_query({"lang": ["de"], "tag": ["a", "b"]}) == (
        'lang:="de" && tag:["a","b"]'
    )


def test_build_search_params_omits_empty_values():
    assert build_search_params("shoes", None, 2, 20) == {
        "q": "shoes",
        "page": 2,
        "per_page": 20,
    }
    params = build_search_params("shoes", {"lang": ["de"]}, 1, 10, "price:asc")
    assert params["filter_by"] == 'lang:="de"'
    assert params["sort_by"] == "price:asc"


async def test_simple_search_queries_alias(typesense_client, fake_typesense):
    fake_typesense.add_collection("www-2024-01-01-10-00")
    fake_typesense.aliases["www"] = "www-2024-01-01-10-00"
    fake_typesense.search_response = {
        "found": 3,
        "hits": [
            {"document": {"id": "1", "title": "One"}, "text_match_info": {"score": "578730123365187705"}},
            {"document": {"title": "no id"}},
            {"document": {"id": "2", "title": "Two"}, "text_match_info": {"score": "oops"}},
        ],
    }

    results = await SearchService(typesense_client).simple_search("www", "one", per_page=5)

    request = fake_typesense.calls("GET", "/collections/www/documents/search")[0]
    assert request.url.params["q"] == "one"
    assert request.url.params["query_by"] == "title"
    assert request.url.params["per_page"] == "5"
    assert results.found == 3
    assert [d["id"] for d in results.documents] == ["1", "2"]
    assert results.scores["1"].index == 578730123365187705
    assert results.scores["2"].index == 0


async def test_result_model_skips_invalid_hits(typesense_client, fake_typesense):
    fake_typesense.add_collection("www")
    fake_typesense.search_response = {
        "found": 2,
        "hits": [
            {"document": {"id": "1", "title": "One"}},
            {"document": {"id": "2"}},
        ],
    }

    results = await SearchService(typesense_client, result_model=Article).expert_search(
        "www", {"q": "*", "query_by": "title"}
    )

    assert results.documents == [Article(id="1", title="One")]
    assert list(results.scores) == ["1"]


async def test_expert_search_requires_parameters(typesense_client, fake_typesense):
    with pytest.raises(ConfigurationError):
        await SearchService(typesense_client).expert_search("www", None)

    assert fake_typesense.requests == []
