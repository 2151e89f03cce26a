# ==============================================
# Case Converter
# ==============================================
#
# PURPOSE:
#   Convert identifiers between camelCase (application side)
#   and snake_case (storage side).
#
# FUNCTIONS:
# ----------
# - to_snake(name: str) -> str
#     "fooBarBaz" -> "foo_bar_baz", "fooBAR" -> "foo_bar"
#
# - to_camel(name: str) -> str
#     "foo_bar_baz" -> "fooBarBaz"
#
# RULES:
# ------
#   1. Works on any unicode letter that has distinct upper and lower
#      forms ("fooÄrger" -> "foo_ärger").
#   2. Runs of capitals don't get an underscore per letter.
#   3. Digits and other characters pass through untouched.
#   4. to_camel(to_snake(x)) == x for ordinary camelCase names.
#
# ==============================================


def _is_upper(char: str) -> bool:
    # Only letters that actually have a lower-case form count
    upper = char.upper()
    return char == upper and upper != char.lower()


def to_snake(name: str) -> str:
    """
    Convert a camelCase name to snake_case.

    Args:
        name: camelCase identifier (e.g., "userName", "fooBAR")

    Returns:
        snake_case identifier (e.g., "user_name", "foo_bar")
    """
    if not name:
        return name

    out = [name[0].lower()]
    prev_upper = _is_upper(name[0])

    for char in name[1:]:
        is_upper = _is_upper(char)
        if is_upper:
            # "fooBAR" -> "foo_bar", not "foo_b_a_r"
            if prev_upper:
                out.append(char.lower())
            else:
                out.append("_" + char.lower())
        else:
            out.append(char)
        prev_upper = is_upper

    return "".join(out)


def to_camel(name: str) -> str:
    """
    Convert a snake_case name to camelCase. Reverses to_snake.

    Args:
        name: snake_case identifier (e.g., "user_name")

    Returns:
        camelCase identifier (e.g., "userName")
    """
    if not name:
        return name

    out = [name[0]]

    for prev_char, char in zip(name, name[1:]):
        if char == "_":
            continue
        if prev_char == "_":
            out.append(char.upper())
        else:
            out.append(char)

    return "".join(out)
