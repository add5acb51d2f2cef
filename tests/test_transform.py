from matrixify_prep.describe import build_body_html, build_body_paragraphs, build_tags
from matrixify_prep.diagnostics import Diagnostics
from matrixify_prep.errors import MissingHandleWarning
from matrixify_prep.models import CanonicalProduct
from matrixify_prep.settings import PipelineOptions
from matrixify_prep.transform import (
    EXPORT_DEFAULTS,
    apply_export_defaults,
    dedupe_records,
    expand_product,
    forward_fill,
    primary_row,
    transform_extracted,
    transform_flexible,
    transform_structured,
)


OPTIONS = PipelineOptions()


def _expand(product, **kwargs):
    base = primary_row(product, handle="h", title="T", body_html="", tags="", options=OPTIONS)
    return expand_product(product, base, **kwargs)


def test_row_count_matches_distinct_images():
    p = CanonicalProduct(
        id="1",
        main_image="http://x/1.jpg",
        thumbnail_images=["http://x/2.jpg", "http://x/1.jpg", "", "http://x/3.jpg", "http://x/2.jpg"],
    )
    rows = _expand(p)
    assert len(rows) == 3
    assert [r["Image Position"] for r in rows] == [1, 2, 3]
    assert [r["Image Src"] for r in rows] == ["http://x/1.jpg", "http://x/2.jpg", "http://x/3.jpg"]
    assert set(rows[1]) == {"Handle", "Image Src", "Image Position"}
    assert all(r["Handle"] == "h" for r in rows)


def test_no_images_yields_single_primary_row():
    rows = _expand(CanonicalProduct(id="1"))
    assert len(rows) == 1
    assert "Image Src" not in rows[0]
    assert "Image Position" not in rows[0]


def test_thumbnails_only_start_at_position_one():
    p = CanonicalProduct(id="1", thumbnail_images=["http://x/a.jpg", "http://x/b.jpg"])
    rows = _expand(p, variant_image=True)
    assert rows[0]["Image Src"] == "http://x/a.jpg"
    assert rows[0]["Variant Image"] == "http://x/a.jpg"
    assert rows[0]["Image Position"] == 1
    assert rows[1]["Image Position"] == 2


def test_variant_image_flag_and_include_images():
    p = CanonicalProduct(id="1", main_image="http://x/1.jpg", thumbnail_images=["http://x/2.jpg"])
    assert "Variant Image" not in _expand(p)[0]
    rows = _expand(p, variant_image=True, include_images=False)
    assert len(rows) == 1
    assert rows[0]["Variant Image"] == "http://x/1.jpg"
    assert "Image Src" not in rows[0]


def test_primary_row_defaults():
    row = primary_row(CanonicalProduct(id="S1"), handle="h", title="T", body_html="", tags="", options=OPTIONS)
    assert row["Vendor"] == "Your-Store"
    assert row["Option1 Name"] == "Size"
    assert row["Option1 Value"] == "Default Title"
    assert row["Variant Price"] == "0.00"
    assert row["Variant Grams"] == 0
    assert row["Variant Inventory Qty"] == 0
    assert row["Published"] is True
    assert row["Gift Card"] is False


def test_primary_row_uses_record_price():
    row = primary_row(CanonicalProduct(id="S1", price="¥1,200"), handle="h", title="T", body_html="", tags="", options=OPTIONS)
    assert row["Variant Price"] == "1200"


def test_body_html_blocks():
    p = CanonicalProduct(id="1", description="Line 1\nLine 2", caution="Dry clean", material="Silk\nWool")
    assert build_body_html(p) == (
        "Line 1<br>Line 2"
        "<br><br><strong>注意:</strong> Dry clean"
        "<br><br><strong>素材:</strong> Silk<br>Wool"
    )
    assert build_body_html(CanonicalProduct(id="1")) == ""


def test_body_paragraphs():
    p = CanonicalProduct(id="1", description="A\nB", caution="C")
    assert build_body_paragraphs(p) == "<p>A<br />B</p>\n<p><strong>【ご注意】</strong><br />C</p>"
    assert build_body_paragraphs(CanonicalProduct(id="1", description="A")) == "<p>A</p>"


def test_tags_drop_blanks():
    assert build_tags(["Red", "", "  ", None, "Slim"]) == "Red, Slim"
    assert build_tags([]) == ""


def test_dedupe_first_occurrence_wins():
    diags = Diagnostics()
    records = [{"k": "A", "d": 1}, {"k": ""}, {"k": "A", "d": 2}, {"k": "B"}]
    kept = list(dedupe_records(records, lambda r: r.get("k"), diags))
    assert [(i, r.get("d"), k) for i, r, k in kept] == [(1, 1, "A"), (4, None, "B")]
    kinds = [e.kind for e in diags.events]
    assert kinds == ["MissingBusinessKeyWarning", "DuplicateKeyWarning"]


def test_dedupe_state_is_per_call():
    records = [{"k": "A"}]
    key = lambda r: r["k"]  # noqa: E731
    assert len(list(dedupe_records(records, key, Diagnostics()))) == 1
    assert len(list(dedupe_records(records, key, Diagnostics()))) == 1


def test_forward_fill():
    rows = [{"Title": "A", "Vendor": "V"}, {"Title": "", "Vendor": ""}, {"Title": "B", "Vendor": ""}]
    filled = forward_fill(rows)
    assert [(r["Title"], r["Vendor"]) for r in filled] == [("A", "V"), ("A", "V"), ("B", "V")]
    assert rows[1]["Title"] == ""


def test_forward_fill_without_prior_value_stays_blank():
    filled = forward_fill([{"Title": "", "Vendor": None}])
    assert filled[0]["Title"] == ""
    assert filled[0]["Vendor"] == ""


def test_apply_export_defaults_drops_rows_without_handle():
    diags = Diagnostics()
    rows = [
        {"Handle": "a", "Title": "A", "Vendor": ""},
        {"Handle": "  ", "Title": "Orphan"},
        {"Handle": "a", "Variant Price": "12"},
    ]
    out = apply_export_defaults(rows, diags)
    assert len(out) == 2
    assert out[0]["Vendor"] == "Your-Store"
    assert out[0]["Option1 Name"] == "Title"
    assert out[0]["Variant Inventory Policy"] == "deny"
    assert out[1]["Variant Price"] == "12"
    for k in EXPORT_DEFAULTS:
        assert k in out[0]
    assert diags.count(MissingHandleWarning) == 1


def test_structured_repeated_handle_emits_images_once():
    records = [
        {"productId": "1", "productName": "Gown", "size": "S", "mainImage": "http://x/1.jpg", "thumbnailImages": ["http://x/2.jpg"]},
        {"productId": "2", "productName": "Gown", "size": "M", "mainImage": "http://x/1.jpg", "thumbnailImages": ["http://x/2.jpg"]},
    ]
    rows, count = transform_structured(records, OPTIONS, Diagnostics())
    assert count == 1
    assert len(rows) == 3
    assert rows[2]["Option1 Value"] == "M"
    assert rows[2]["Variant Image"] == "http://x/1.jpg"
    assert "Image Src" not in rows[2]


def test_structured_handle_falls_back_to_raw_id():
    rows, _ = transform_structured([{"productId": "ID 9", "productName": "ドレス"}], OPTIONS, Diagnostics())
    assert rows[0]["Handle"] == "ID 9"
    assert rows[0]["Title"] == "ドレス"


def test_flexible_title_handle_and_tags():
    rec = {"productId": "D747", "name": "Satin Dress", "color": "Burgundy", "material": "", "fitLevel": "Slim", "image": "http://x/1.jpg"}
    rows, count = transform_flexible([rec], OPTIONS, Diagnostics())
    assert count == 1
    row = rows[0]
    assert row["Title"] == "Satin Dress - D747"
    assert row["Handle"] == "satin-dress-d747"
    assert row["Tags"] == "Burgundy, Slim"
    assert row["Variant SKU"] == "D747"
    assert row["Variant Image"] == "http://x/1.jpg"


def test_flexible_variant_image_can_be_disabled():
    rec = {"productId": "D1", "name": "X", "mainImage": "http://x/1.jpg"}
    opts = PipelineOptions(variant_image_from_main=False)
    rows, _ = transform_flexible([rec], opts, Diagnostics())
    assert "Variant Image" not in rows[0]
    assert rows[0]["Image Src"] == "http://x/1.jpg"


def test_extracted_record_uses_color_option_and_cjk_handle():
    rec = {
        "productId": "207",
        "productName": "タキシード",
        "color": "Off White",
        "vendor": "WITH A WISH",
        "material": "Silk",
        "mainImage": "http://x/1.jpg",
    }
    rows, count = transform_extracted(rec, OPTIONS, Diagnostics())
    assert count == 1
    assert len(rows) == 1
    row = rows[0]
    assert row["Title"] == "タキシード Off White"
    assert row["Handle"] == "タキシード-off-white"
    assert row["Option1 Name"] == "カラー"
    assert row["Option1 Value"] == "Off White"
    assert row["Tags"] == "WITH A WISH, Silk, タキシード"
    assert row["Image Position"] == 1
    assert "Variant Image" not in row
