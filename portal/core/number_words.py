# portal/core/number_words.py
"""Vietnamese reading of amounts, as printed on tuition reports."""

ONES = ["", "một", "hai", "ba", "bốn", "năm", "sáu", "bảy", "tám", "chín"]

SCALES = ["", "nghìn", "triệu", "tỷ", "nghìn tỷ", "triệu tỷ"]


def _read_group(num: int) -> str:
    """Reads 0-999."""
    hundreds, remainder = divmod(num, 100)
    tens, ones = divmod(remainder, 10)
    words = []

    if hundreds:
        words.append(f"{ONES[hundreds]} trăm")

    if tens > 1:
        words.append(f"{ONES[tens]} mươi")
        if ones == 1:
            words.append("một")
        elif ones == 5:
            words.append("lăm")
        elif ones:
            words.append(ONES[ones])
    elif tens == 1:
        words.append("mười")
        if ones == 5:
            words.append("lăm")
        elif ones:
            words.append(ONES[ones])
    elif ones:
        if hundreds:
            words.append("lẻ")
        words.append(ONES[ones])

    return " ".join(words)


def _read(num: int) -> str:
    if num == 0:
        return "không"
    if num < 0:
        return "âm " + _read(-num)

    groups = []
    while num > 0:
        num, group = divmod(num, 1000)
        groups.insert(0, group)

    words = []
    for i, group in enumerate(groups):
        if not group:
            continue
        scale = len(groups) - 1 - i
        words.append(_read_group(group))
        if 0 < scale < len(SCALES):
            words.append(SCALES[scale])

    return " ".join(words)


def number_to_words(num) -> str:
    words = _read(int(round(num)))
    return words[:1].upper() + words[1:]


def currency_to_words(amount) -> str:
    return number_to_words(amount) + " đồng"
