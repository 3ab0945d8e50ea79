from portal.core.number_words import currency_to_words, number_to_words


def test_small_numbers():
    assert number_to_words(0) == "Không"
    assert number_to_words(7) == "Bảy"
    assert number_to_words(10) == "Mười"
    assert number_to_words(15) == "Mười lăm"
    assert number_to_words(21) == "Hai mươi một"
    assert number_to_words(45) == "Bốn mươi lăm"


def test_hundreds_use_le_for_missing_tens():
    assert number_to_words(105) == "Một trăm lẻ năm"
    assert number_to_words(310) == "Ba trăm mười"


def test_scales():
    assert number_to_words(1_500_000) == "Một triệu năm trăm nghìn"
    assert number_to_words(2_000_000_000) == "Hai tỷ"


def test_negative_and_fractional_amounts():
    assert number_to_words(-25) == "Âm hai mươi lăm"
    assert number_to_words(4999.6) == "Năm nghìn"


def test_currency_suffix():
    assert currency_to_words(2_000_000) == "Hai triệu đồng"
