import pytest

from matrixify_prep.normalize import clean_price, html_lines, slugify, slugify_cjk


SAMPLES = [
    "D747 Satin Twill Dress - Burgundy",
    "Crème Brûlée & Co.",
    "  leading and trailing  ",
    "a_b/c:d;e,f·g",
    "Straße Ñandú",
    "ドレス",
    "--already-a-slug--",
    "Tab\tand\nnewline",
]


def test_slugify_reference_title():
    assert slugify("D747 Satin Twill Dress - Burgundy") == "d747-satin-twill-dress-burgundy"


@pytest.mark.parametrize("text", SAMPLES)
def test_slugify_is_idempotent(text):
    once = slugify(text)
    assert slugify(once) == once


def test_slugify_transliterates_and_expands_ampersand():
    assert slugify("Crème Brûlée & Co.") == "creme-brulee-and-co"
    assert slugify("Straße Ñandú") == "strase-nandu"


def test_slugify_punctuation_becomes_hyphen():
    assert slugify("a_b/c:d;e,f") == "a-b-c-d-e-f"


def test_slugify_blank_and_cjk_only():
    assert slugify(None) == ""
    assert slugify("") == ""
    assert slugify("ドレス") == ""


def test_slugify_accepts_numbers():
    assert slugify(207) == "207"


def test_slugify_cjk_keeps_japanese():
    assert slugify_cjk("ドレス Black") == "ドレス-black"
    assert slugify_cjk("シルク\u3000ウール Off White") == "シルク-ウール-off-white"


def test_slugify_cjk_strips_other_symbols():
    assert slugify_cjk("Silk Dress (Navy)!") == "silk-dress-navy"
    assert slugify_cjk("") == ""


def test_clean_price():
    assert clean_price("¥107,800") == "107800"
    assert clean_price("12.50 USD") == "12.50"
    assert clean_price("") == ""


def test_html_lines():
    assert html_lines("a\nb\r\nc") == "a<br>b<br>c"
    assert html_lines("a\nb", "<br />") == "a<br />b"
