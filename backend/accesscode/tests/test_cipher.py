import pytest

from backend.accesscode.app import cipher


@pytest.mark.parametrize("value", [0, 1, 0x12345678, 0x80000000, 0xFFFFFFFF])
def test_decrypt_inverts_encrypt(value):
    key1, key2 = 0x47266584, 0x37195241

    encrypted = cipher.encrypt(value, key1, key2)

    assert 0 <= encrypted <= 0xFFFFFFFF
    assert cipher.decrypt(encrypted, key1, key2) == value


def test_encrypt_depends_on_both_key_halves():
    baseline = cipher.encrypt(0x0BADF00D, 1, 2)

    assert cipher.encrypt(0x0BADF00D, 1, 2) == baseline
    assert cipher.encrypt(0x0BADF00D, 3, 2) != baseline
    assert cipher.encrypt(0x0BADF00D, 1, 4) != baseline


@pytest.mark.parametrize(
    "state,expected",
    [
        (0, 0),
        (1 << 1, 1),
        (1 << 9, 1),
        (1 << 20, 0),
        ((1 << 31) | (1 << 26) | (1 << 20) | (1 << 1), 1),
        (0xFFFFFFFF, 0),
    ],
)
def test_nlf_lookup(state, expected):
    assert cipher._nlf(state) == expected


def test_derive_keys_from_digits():
    keys = cipher.derive_keys("123456")

    assert keys.key1 == 0x47266584
    assert keys.key2 == 0x37195241


def test_derive_keys_pads_truncates_and_ignores_non_digits():
    zero_keys = cipher.KeyPair(key1=0x43256785, key2=0x37195444)

    assert cipher.derive_keys("0000") == zero_keys
    assert cipher.derive_keys("abcd") == zero_keys
    assert cipher.derive_keys("") == zero_keys
    assert cipher.derive_keys("123456789") == cipher.derive_keys("12345678")


def test_recover_usercode_inverts_crypt_usercode():
    for value in (0, 7, 0x40001234, 0xC0000008):
        minted = cipher.crypt_usercode(value, "2468")
        assert cipher.recover_usercode(minted, "2468") == value


@pytest.mark.parametrize(
    "cipher_value,expected",
    [
        (0, "5000000000"),
        (0xFFFFFFFF, "9294967295"),
        (0x1_0000_0001, "5000000001"),
    ],
)
def test_format_code(cipher_value, expected):
    assert cipher.format_code(cipher_value) == expected


@pytest.mark.parametrize(
    "code,expected",
    [
        ("5000000000", 0),
        (" 9294967295 ", 0xFFFFFFFF),
        ("9294967296", None),
        ("4999999999", None),
        ("50000x0000", None),
        ("", None),
        ("-5000000000", None),
        ("５０００００００００", None),
    ],
)
def test_parse_code(code, expected):
    assert cipher.parse_code(code) == expected
