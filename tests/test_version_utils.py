from version_utils import normalize_filename, normalize_version


def test_beautify_collapses_prefix_gap_and_truncates():
    assert normalize_version("  V   12.1 beta", beautify=True) == "v12.1"


def test_beautify_adds_v_prefix():
    assert normalize_version("2.0", beautify=True) == "v2.0"
    assert normalize_version("2.0", beautify=False) == "2.0"


def test_plain_mode_keeps_case_and_gap_truncation():
    assert normalize_version("V 12") == "V"
    assert normalize_version("V12") == "V12"
    assert normalize_version("V12", beautify=True) == "v12"


def test_non_numeric_versions_are_not_prefixed():
    assert normalize_version("beta-3", beautify=True) == "beta-3"


def test_illegal_characters_replaced():
    assert normalize_version('1.0:"rc"/2') == "1.0__rc__2"
    assert normalize_version("1.0|2", replacement="-") == "1.0-2"


def test_space_replacement():
    assert normalize_version("1.0   final  build", space_replacement="_") == "1.0_final_build"


def test_normalize_filename_strips_non_printable():
    assert normalize_filename("a\tb<c>") == "ab_c_"
