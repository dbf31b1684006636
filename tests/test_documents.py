import logging

from buildmart.services.documents import (
    ARTICLE_EXCERPT_FALLBACK,
    TENDER_EXCERPT_FALLBACK,
    build_excerpt,
    decode_article,
    decode_tender,
    keep_valid,
    list_filenames,
    load_documents,
)
from tests.conftest import InMemoryStorage

TENDER = """---
tender_no: 42
title: Road Rehabilitation
closing: 2024-03-01
opening: 2024-03-02
region: Oromia
category: Road and Bridge Construction
published: 2024-02-01
featured: true
---

The regional bureau invites bidders for asphalt works.

Second paragraph.
"""

ARTICLE = """---
title: Cement prices fall
slug: cement-prices-fall
category: materials
author: Hana
published_date: "2024-05-05"
views: 12
---

Cement prices dropped for the third month.
"""


def test_decode_tender():
    result = decode_tender("road-rehab.md", TENDER)

    assert result.ok
    tender = result.document
    assert tender.id == "road-rehab"
    assert tender.tender_no == 42
    assert tender.title == "Road Rehabilitation"
    assert tender.published_on == "2024-02-01"
    assert tender.bid_closing_date == "2024-03-01"
    assert tender.region == "Oromia"
    assert tender.featured is True
    assert tender.excerpt == "The regional bureau invites bidders for asphalt works...."


def test_tender_wire_names():
    data = decode_tender("road-rehab.md", TENDER).document.model_dump(by_alias=True)
    assert {"tenderNo", "publishedOn", "bidClosingDate", "bidOpeningDate"} <= set(data)


def test_decode_article_with_defaults():
    result = decode_article("a.md", "No front matter here.\n\nJust text.")

    assert result.ok
    article = result.document
    assert article.title == "Untitled Article"
    assert article.slug == "a"
    assert article.author == "Admin"
    assert article.category == "General"
    assert article.published_date == "N/A"
    assert article.views == 0


def test_decode_article():
    article = decode_article("cement.md", ARTICLE).document
    assert article.author == "Hana"
    assert article.views == 12
    assert article.excerpt.startswith("Cement prices dropped")


def test_byte_order_mark_is_ignored():
    result = decode_article("bom.md", "\ufeff" + ARTICLE)
    assert result.ok
    assert result.document.title == "Cement prices fall"


def test_unterminated_front_matter_is_an_error():
    result = decode_tender("broken.md", "---\ntitle: x\n\nbody without a closing line\n")
    assert not result.ok
    assert result.error.filename == "broken.md"


def test_invalid_yaml_is_an_error():
    result = decode_article("bad.md", "---\ntitle: [unclosed\n---\nbody\n")
    assert not result.ok


def test_non_mapping_front_matter_is_an_error():
    result = decode_article("list.md", "---\n- a\n- b\n---\nbody\n")
    assert not result.ok
    assert "mapping" in result.error.reason


def test_field_validation_failure_is_an_error():
    result = decode_article("views.md", "---\nviews: lots\n---\nbody\n")
    assert not result.ok


def test_excerpt_is_cut_and_falls_back():
    body = "\n" + "x" * 400
    assert build_excerpt(body, 150, "fallback") == "x" * 150 + "..."
    assert build_excerpt("single line", 150, "fallback") == "fallback"
    assert decode_tender("t.md", "---\ntitle: t\n---\nonly").document.excerpt == TENDER_EXCERPT_FALLBACK
    assert decode_article("a.md", "").document.excerpt == ARTICLE_EXCERPT_FALLBACK


def test_keep_valid_logs_and_skips_failures(caplog):
    results = [
        decode_tender("good.md", TENDER),
        decode_tender("bad.md", "---\nunterminated"),
    ]
    with caplog.at_level(logging.WARNING):
        documents = keep_valid(results)

    assert [d.id for d in documents] == ["good"]
    assert "bad.md" in caplog.text


def test_partial_document_failure_keeps_the_rest():
    storage = InMemoryStorage()
    storage.put_text("tenders/a.md", TENDER)
    storage.put_text("tenders/b.md", "---\ntitle: [oops\n---\n")
    storage.put_text("tenders/c.md", TENDER.replace("Road Rehabilitation", "Bridge Repair"))

    tenders = load_documents(storage, "tenders", decode_tender)

    assert sorted(t.title for t in tenders) == ["Bridge Repair", "Road Rehabilitation"]


def test_list_filenames_strips_the_prefix():
    storage = InMemoryStorage()
    storage.put_text("articles/one.md", ARTICLE)
    storage.put_text("articles/", "")
    storage.put_text("tenders/two.md", TENDER)

    assert list_filenames(storage, "articles") == ["one.md"]
