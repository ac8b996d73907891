import pytest

from gotenberg.sorting import alphanumeric_less, alphanumeric_sort, extract_number


@pytest.mark.parametrize(
    "values, expected",
    [
        (
            ["10qux.pdf", "2_baz.txt", "2_aza.txt", "1bar.pdf", "Afoo.txt", "Bbar.docx",
             "25zeta.txt", "3.pdf", "4_foo.pdf"],
            ["1bar.pdf", "2_aza.txt", "2_baz.txt", "3.pdf", "4_foo.pdf", "10qux.pdf",
             "25zeta.txt", "Afoo.txt", "Bbar.docx"],
        ),
        (
            ["sample1_10.pdf", "sample1_11.pdf", "sample1_4.pdf", "sample1_3.pdf",
             "sample1_1.pdf", "sample1_2.pdf"],
            ["sample1_1.pdf", "sample1_2.pdf", "sample1_3.pdf", "sample1_4.pdf",
             "sample1_10.pdf", "sample1_11.pdf"],
        ),
        (
            ["sample1_10", "sample1_11", "sample1_4", "sample1_3", "sample1_1", "sample1_2"],
            ["sample1_1", "sample1_2", "sample1_3", "sample1_4", "sample1_10", "sample1_11"],
        ),
    ],
)
def test_alphanumeric_sort(values, expected):
    assert alphanumeric_sort(values) == expected


def test_hrtime_values_number_first():
    values = ["245654773395259", "245654773395039", "[card-number]",
              "245654773394919", "245654773394369"]
    result = alphanumeric_sort(values)
    assert result[-1] == "[card-number]"
    assert result[:-1] == ["245654773394369", "245654773394919",
                           "245654773395039", "245654773395259"]


def test_extract_number_prefix():
    assert extract_number("10qux.pdf") == (10, "qux.pdf")


def test_extract_number_before_extension():
    assert extract_number("sample1_10.pdf") == (10, "sample1_.pdf")


def test_extract_number_trailing():
    assert extract_number("sample1_11") == (11, "sample1_")


def test_extract_number_none():
    assert extract_number("Afoo.txt") == (-1, "Afoo.txt")


def test_extract_number_uses_base_name():
    assert extract_number("/tmp/dir/3.pdf") == (3, ".pdf")


def test_numbered_before_unnumbered():
    assert alphanumeric_less("25zeta.txt", "Afoo.txt") is True
    assert alphanumeric_less("Afoo.txt", "25zeta.txt") is False


def test_sort_does_not_mutate_input():
    values = ["2.pdf", "1.pdf"]
    alphanumeric_sort(values)
    assert values == ["2.pdf", "1.pdf"]